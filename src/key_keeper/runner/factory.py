# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Client factory for creating store clients from configuration.

Uses the Registry pattern to map type strings to client builders,
allowing extensibility without modifying factory code.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, ClassVar

from .schema import ClientConfigSchema

if TYPE_CHECKING:
    from key_keeper.clients.base import StoreClient

ClientBuilder = Callable[[ClientConfigSchema], "StoreClient"]


class ClientFactoryError(Exception):
    """Raised when client creation fails."""

    pass


def _memory_client(config: ClientConfigSchema) -> StoreClient:
    # Backends are imported lazily so each only needs its own extra
    from key_keeper.clients.memory import InMemoryClient

    return InMemoryClient()


def _redis_client(config: ClientConfigSchema) -> StoreClient:
    from key_keeper.clients.redis_client import connect

    return connect(
        config.host,
        config.port,
        password=config.password,
        db=config.db,
        connect_timeout=config.connect_timeout,
    )


class ClientFactory:
    """Creates store clients from configuration.

    Client types are registered at class level and can be extended via
    the `register` class method.

    Example:
        factory = ClientFactory()
        client = factory.create(ClientConfigSchema(type="redis", host="10.0.0.5"))
    """

    # Class-level registry mapping type strings to client builders
    _registry: ClassVar[dict[str, ClientBuilder]] = {
        "memory": _memory_client,
        "redis": _redis_client,
    }

    @classmethod
    def register(cls, type_name: str, builder: ClientBuilder) -> None:
        """Register a custom client type.

        Args:
            type_name: Type string to use in configuration
            builder: Callable taking a ClientConfigSchema and returning a client

        Example:
            ClientFactory.register("fake", lambda config: FakeClient())
        """
        cls._registry[type_name] = builder

    @classmethod
    def registered_types(cls) -> list[str]:
        """Return list of registered client type names."""
        return list(cls._registry.keys())

    def create(self, config: ClientConfigSchema) -> StoreClient:
        """Create a client from configuration.

        Args:
            config: Client configuration

        Returns:
            Store client instance

        Raises:
            ClientFactoryError: If type is unknown or creation fails
        """
        builder = self._registry.get(config.type)
        if not builder:
            available = ", ".join(sorted(self.registered_types()))
            raise ClientFactoryError(
                f"Unknown client type: '{config.type}'. Available types: {available}"
            )

        try:
            return builder(config)
        except Exception as e:
            raise ClientFactoryError(f"Failed to create '{config.type}' client: {e}") from e
