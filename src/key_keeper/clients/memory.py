"""InMemoryClient — zero-config, server-less store client for development and testing."""

from __future__ import annotations

from typing import Any

try:
    from fakeredis import FakeServer
    from fakeredis.aioredis import FakeRedis
except ImportError as exc:
    raise ImportError(
        "InMemoryClient requires the 'fakeredis' package. "
        "Install it with: pip install key-keeper[memory]"
    ) from exc


class InMemoryClient(FakeRedis):
    """``redis.asyncio.Redis`` look-alike backed by an in-process fake server.

    Each instance gets its own server unless one is passed in, so clients
    never see each other's keys.  Responses are decoded to ``str``.  Data
    is lost on process exit.
    """

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("server", FakeServer())
        kwargs.setdefault("decode_responses", True)
        super().__init__(**kwargs)
