"""Connect ``redis.asyncio`` clients that accessors can forward to directly."""

from __future__ import annotations

try:
    import redis.asyncio as aioredis
except ImportError as exc:
    raise ImportError(
        "Redis clients require the 'redis' package. Install it with: pip install key-keeper[redis]"
    ) from exc


def connect(
    host: str = "0.0.0.0",
    port: int = 6379,
    *,
    password: str = "",
    db: int = 0,
    connect_timeout: float = 10.0,
) -> aioredis.Redis:
    """Return a lazily-connecting client.  Responses are decoded to ``str``."""
    return aioredis.Redis(
        host=host,
        port=port,
        password=password or None,
        db=db,
        socket_connect_timeout=connect_timeout,
        decode_responses=True,
    )
