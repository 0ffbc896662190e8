"""Command vocabularies and the CommandSet filter."""

from __future__ import annotations

import keyword
from collections.abc import Iterable
from dataclasses import dataclass

# Commands every model type inherits.
GENERIC_COMMANDS: tuple[str, ...] = (
    "del", "dump", "exists", "expire", "expireat", "keys", "migrate",
    "move", "object", "persist", "pexpire", "pexpireat", "pttl", "randomkey",
    "rename", "renamenx", "restore", "get", "ttl", "type",
)  # fmt: skip

STRING_COMMANDS: tuple[str, ...] = (
    "append", "bitcount", "bitop", "decr", "decrby", "get", "getbit",
    "getrange", "getset", "incr", "incrby", "incrbyfloat", "mget", "mset",
    "msetnx", "psetex", "set", "setbit", "setex", "setnx", "setrange",
    "strlen",
)  # fmt: skip

HASH_COMMANDS: tuple[str, ...] = (
    "hdel", "hexists", "hget", "hgetall", "hincrby", "hincrbyfloat",
    "hkeys", "hlen", "hmget", "hmset", "hset", "hsetnx", "hvals",
)  # fmt: skip

LIST_COMMANDS: tuple[str, ...] = (
    "blpop", "brpop", "brpoplpush", "lindex", "linsert", "llen", "lpop",
    "lpush", "lpushx", "lrange", "lrem", "lset", "ltrim", "rpop",
    "rpoplpush", "rpush", "rpushx",
)  # fmt: skip

SET_COMMANDS: tuple[str, ...] = (
    "sadd", "scard", "sdiff", "sdiffstore", "sinter", "sinterstore",
    "sismember", "smembers", "smove", "spop", "srandmember", "srem",
    "sunion", "sunionstore",
)  # fmt: skip

SORTED_SET_COMMANDS: tuple[str, ...] = (
    "zadd", "zcard", "zcount", "zincrby", "zinterstore", "zrange",
    "zrangebyscore", "zrank", "zrem", "zremrangebyrank", "zremrangebyscore",
    "zrevrange", "zrevrangebyscore", "zrevrank", "zscore", "zunionstore",
)  # fmt: skip

# Store commands whose names are Python keywords, mapped to the method name
# used on the client (redis-py spells ``del`` as ``delete``).
KEYWORD_ALIASES: dict[str, str] = {"del": "delete"}


def client_method_name(command: str) -> str:
    """Return the attribute to call on the store client for *command*."""
    return KEYWORD_ALIASES.get(command, command)


def python_alias(command: str) -> str | None:
    """Return a callable-by-syntax alias for keyword commands, else ``None``."""
    if keyword.iskeyword(command):
        return KEYWORD_ALIASES.get(command, f"{command}_")
    return None


def ordered_unique(names: Iterable[str]) -> tuple[str, ...]:
    """Lowercase and de-duplicate *names*, keeping first-seen order."""
    return tuple(dict.fromkeys(name.lower() for name in names))


@dataclass(frozen=True)
class CommandSet:
    """The commands available on accessors of one model.

    Attributes:
        base:      Every command the model's type offers, in order.
        allowed:   Allow-list from the definition, or ``None`` when absent.
        denied:    Deny-list from the definition, or ``None`` when absent.
        effective: ``base`` filtered by ``allowed`` then ``denied``.  Order
                   always follows ``base``.
    """

    base: tuple[str, ...]
    allowed: frozenset[str] | None
    denied: frozenset[str] | None
    effective: tuple[str, ...]

    @classmethod
    def compute(
        cls,
        base: Iterable[str],
        allowed: Iterable[str] | None = None,
        denied: Iterable[str] | None = None,
    ) -> CommandSet:
        """Build a CommandSet.

        ``allowed=None`` means no allow-list; ``allowed=[]`` allows nothing.
        """
        base_t = ordered_unique(base)
        allowed_s = frozenset(ordered_unique(allowed)) if allowed is not None else None
        denied_s = frozenset(ordered_unique(denied)) if denied is not None else None

        effective = [c for c in base_t if allowed_s is None or c in allowed_s]
        if denied_s is not None:
            effective = [c for c in effective if c not in denied_s]

        return cls(base=base_t, allowed=allowed_s, denied=denied_s, effective=tuple(effective))

    def __contains__(self, command: object) -> bool:
        return isinstance(command, str) and command.lower() in self.effective

    def __iter__(self):
        return iter(self.effective)

    def __len__(self) -> int:
        return len(self.effective)


def canonical_command(name: str) -> str:
    """Map an accessor attribute (``HSET``, ``delete``) back to its command name."""
    lowered = name.lower()
    for command, alias in KEYWORD_ALIASES.items():
        if lowered == alias:
            return command
    return lowered.rstrip("_") if keyword.iskeyword(lowered.rstrip("_")) else lowered
