"""StoreClient protocol — what accessors expect from the injected client."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StoreClient(Protocol):
    """Minimal shape of a store client.

    Accessors look commands up by name (``client.hset``, ``client.delete``
    ...) and call them as ``client.<command>(key, *args, **kwargs)``.
    Methods may be coroutines (``redis.asyncio.Redis``,
    :class:`~key_keeper.clients.memory.InMemoryClient`) or plain functions whose
    result is delivered as-is.  Only the generic key commands are listed
    here; type-specific commands are resolved dynamically.
    """

    async def delete(self, *names: str) -> Any: ...

    async def exists(self, *names: str) -> Any: ...

    async def expire(self, name: str, time: Any) -> Any: ...

    async def ttl(self, name: str) -> Any: ...

    async def type(self, name: str) -> Any: ...
