"""Store clients that accessors can forward commands to.

``InMemoryClient`` (``key_keeper.clients.memory``) and ``connect``
(``key_keeper.clients.redis_client``) need the ``memory`` and ``redis``
extras and are imported from their modules.
"""

from key_keeper.clients.base import StoreClient

__all__ = ["StoreClient"]
