"""Accessor factory — generate key-bound proxy classes for models."""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from collections.abc import Awaitable, Callable
from functools import partial
from typing import TYPE_CHECKING, Any, ClassVar

from key_keeper.commands import CommandSet, client_method_name, python_alias
from key_keeper.exceptions import KeyResolutionError, StoreError
from key_keeper.template import Failed, Ready, Resolution

if TYPE_CHECKING:
    from key_keeper.definition import ModelDefinition

logger = logging.getLogger(__name__)

# Called as ``callback(error, result)`` exactly once per command.
Callback = Callable[[BaseException | None, Any], Any]


class Accessor:
    """Base class of every generated accessor.

    An accessor is bound to one resolved key (``Ready``) or to the error
    that prevented resolution (``Failed``).  Generated subclasses add one
    method per permitted command.  Each method forwards
    ``(key, *args, **kwargs)`` to the store client's method of the same
    name and returns the accessor, so calls can be chained::

        post = keeper.model("post").get("1234")
        post.hset("title", "hello").hget("title", callback=on_title)
        results = await post.gather()

    The callback may be passed as ``callback=`` or as the last positional
    argument.  A ``Failed`` accessor never touches the store: the error is
    handed to the command's callback synchronously and re-raised by
    :meth:`gather`.

    Outside a running event loop, commands run immediately against a
    synchronous client and the callback receives the outcome before the
    method returns.  Client failures always arrive as :class:`StoreError`.
    """

    definition: ClassVar[ModelDefinition | None] = None
    commands: ClassVar[tuple[str, ...]] = ()

    def __init__(self, state: Resolution, client: Any = None) -> None:
        self._state = state
        self._client = client
        self._pending: list[asyncio.Future[Any]] = []

    # ── state ────────────────────────────────────────────────

    @property
    def key(self) -> str | None:
        """The resolved key, or ``None`` when resolution failed."""
        return self._state.key if isinstance(self._state, Ready) else None

    @property
    def error(self) -> KeyResolutionError | None:
        return self._state.error if isinstance(self._state, Failed) else None

    @property
    def ok(self) -> bool:
        return isinstance(self._state, Ready)

    @property
    def client(self) -> Any:
        return self._client

    # ── promise-style consumption ────────────────────────────

    async def gather(self) -> list[Any]:
        """Await every command issued so far and return results in call order.

        Raises the carried key error for a ``Failed`` accessor, or the first
        store error among the issued commands.
        """
        if isinstance(self._state, Failed):
            raise self._state.error
        pending, self._pending = self._pending, []
        return list(await asyncio.gather(*pending))

    # ── forwarding ───────────────────────────────────────────

    def _issue(
        self,
        command: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        callback: Callback | None,
    ) -> Accessor:
        state = self._state
        if isinstance(state, Failed):
            logger.debug("Skipping '%s': %s", command, state.error)
            if callback is not None:
                callback(state.error, None)
            return self

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._run_now(command, state.key, args, kwargs, callback)
            return self

        future = self._dispatch(loop, command, state.key, args, kwargs)
        self._pending.append(future)
        if callback is not None:
            future.add_done_callback(partial(_deliver, callback))
        return self

    def _dispatch(
        self,
        loop: asyncio.AbstractEventLoop,
        command: str,
        key: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> asyncio.Future[Any]:
        logger.debug("Issuing '%s' on key '%s'", command, key)
        try:
            result = self._invoke(command, key, args, kwargs)
        except StoreError as exc:
            future = _failed(loop, exc)
        else:
            if inspect.isawaitable(result):
                future = asyncio.ensure_future(_settle(command, result))
            else:
                future = loop.create_future()
                future.set_result(result)

        future.add_done_callback(partial(_log_failure, command, key))
        return future

    def _run_now(
        self,
        command: str,
        key: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        callback: Callback | None,
    ) -> None:
        """Issue *command* from synchronous code; only synchronous clients can answer."""
        logger.debug("Issuing '%s' on key '%s' without an event loop", command, key)
        try:
            result = self._invoke(command, key, args, kwargs)
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise StoreError(command, "asynchronous client requires a running event loop")
        except StoreError as exc:
            logger.debug("Command '%s' on key '%s' failed: %r", command, key, exc)
            if callback is not None:
                callback(exc, None)
            return
        if callback is not None:
            callback(None, result)

    def _invoke(
        self,
        command: str,
        key: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        if self._client is None:
            raise StoreError(command, "no store client configured")
        method = getattr(self._client, client_method_name(command), None)
        if method is None:
            raise StoreError(command, "command not supported by client")
        try:
            return method(key, *args, **kwargs)
        except StoreError:
            raise
        except Exception as exc:
            raise StoreError(command, str(exc)) from exc

    def __repr__(self) -> str:
        name = self.definition.name if self.definition is not None else "?"
        if isinstance(self._state, Ready):
            return f"<{type(self).__name__} model={name!r} key={self._state.key!r}>"
        return f"<{type(self).__name__} model={name!r} error={self._state.error}>"


def _failed(loop: asyncio.AbstractEventLoop, exc: BaseException) -> asyncio.Future[Any]:
    future = loop.create_future()
    future.set_exception(exc)
    return future


async def _settle(command: str, awaitable: Awaitable[Any]) -> Any:
    try:
        return await awaitable
    except StoreError:
        raise
    except Exception as exc:
        raise StoreError(command, str(exc)) from exc


def _deliver(callback: Callback, future: asyncio.Future[Any]) -> None:
    if future.cancelled():
        callback(asyncio.CancelledError(), None)
    elif future.exception() is not None:
        callback(future.exception(), None)
    else:
        callback(None, future.result())


def _log_failure(command: str, key: str, future: asyncio.Future[Any]) -> None:
    # Retrieving the exception also keeps asyncio from warning about it.
    if not future.cancelled() and future.exception() is not None:
        logger.debug("Command '%s' on key '%s' failed: %r", command, key, future.exception())


def _forwarder(command: str) -> Callable[..., Accessor]:
    def forward(self: Accessor, *args: Any, callback: Callback | None = None, **kwargs: Any) -> Accessor:
        # A trailing callable is the callback; store arguments never are.
        if callback is None and args and callable(args[-1]):
            args, callback = args[:-1], args[-1]
        return self._issue(command, args, kwargs, callback)

    forward.__name__ = command
    forward.__doc__ = f"Forward ``{command}`` to the store client with the bound key."
    return forward


_RESERVED = frozenset(name for name in dir(Accessor) if not name.startswith("_"))


class AccessorBuilder:
    """In-progress description of an accessor class.

    Type customization hooks receive the builder before the class is
    created and may attach class attributes or extra methods.
    """

    def __init__(self, name: str, commands: CommandSet) -> None:
        self.name = name
        self.commands = commands
        self.attributes: dict[str, Any] = {}

    def set_attribute(self, name: str, value: Any) -> None:
        self.attributes[name] = value

    def add_method(self, name: str, func: Callable[..., Any]) -> None:
        self.attributes[name] = func

    def build(self) -> type[Accessor]:
        namespace: dict[str, Any] = {"commands": self.commands.effective}
        for command in self.commands.effective:
            forward = _forwarder(command)
            names = [command, command.upper()]
            alias = python_alias(command)
            if alias is not None:
                names.append(alias)
            for attr in names:
                if attr in _RESERVED:
                    raise ValueError(f"command '{command}' collides with accessor attribute '{attr}'")
                namespace[attr] = forward

        namespace.update(self.attributes)
        return type(_class_name(self.name), (Accessor,), namespace)


def build_accessor_class(
    name: str,
    commands: CommandSet,
    customize: Callable[[AccessorBuilder], None] | None = None,
) -> type[Accessor]:
    """Create the accessor class for a model named *name*."""
    builder = AccessorBuilder(name, commands)
    if customize is not None:
        customize(builder)
    return builder.build()


def _class_name(model_name: str) -> str:
    words = [w for w in re.split(r"[^A-Za-z0-9]+", model_name) if w]
    stem = "".join(w[:1].upper() + w[1:] for w in words) or "Model"
    if stem[0].isdigit():
        stem = f"Model{stem}"
    return f"{stem}Accessor"
