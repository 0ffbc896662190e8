"""Tests for Keeper — type catalog and model registration."""

import threading

import pytest

from key_keeper import (
    DuplicateModelNameError,
    Keeper,
    ModelConfigError,
    ModelDefinition,
    ModelNotFoundError,
    ModelType,
    TypeCatalog,
    UnknownModelTypeError,
)
from key_keeper.clients.memory import InMemoryClient
from key_keeper.commands import GENERIC_COMMANDS

# ── built-in types ───────────────────────────────────────────


def test_builtin_types_registered(keeper):
    for name in ["GENERIC", "STRING", "HASH", "LIST", "SET", "SORTED_SET"]:
        assert keeper.get_type(name) is not None
        assert keeper.model_types[name] == name


def test_builtin_types_include_generic_commands(keeper):
    entry = keeper.get_type(ModelType.LIST)
    assert entry.commands[: len(GENERIC_COMMANDS)] == GENERIC_COMMANDS
    assert "lpush" in entry.commands


def test_keepers_do_not_share_catalogs():
    a, b = Keeper(), Keeper()
    a.define_type("counter", ["incr"])
    assert a.get_type("COUNTER") is not None
    assert b.get_type("COUNTER") is None


def test_keeper_copies_given_catalog():
    catalog = TypeCatalog()
    catalog.define("custom", ["ping"])
    keeper = Keeper(types=catalog)
    keeper.define_type("other")
    assert "OTHER" not in catalog
    assert keeper.get_type("custom").commands[-1] == "ping"


# ── define_type ──────────────────────────────────────────────


@pytest.mark.parametrize("name", ["sortedSet", "sorted set", "sorted-set", "SORTED_SET", "Sorted_Set"])
def test_type_names_are_canonicalized(keeper, name):
    assert keeper.define_type(name, ["zadd"]).name == "SORTED_SET"


def test_define_type_prepends_generic(keeper):
    entry = keeper.define_type("bloom", ["bf.add", "bf.exists"])
    assert entry.name == "BLOOM"
    assert entry.commands == (*GENERIC_COMMANDS, "bf.add", "bf.exists")


def test_redefining_type_overwrites(keeper, caplog):
    keeper.define_type("counter", ["incr"])
    with caplog.at_level("WARNING", logger="key_keeper.model_types"):
        entry = keeper.define_type("counter", ["decr"])
    assert keeper.get_type("COUNTER") is entry
    assert "decr" in entry.commands
    assert "incr" not in entry.commands
    assert "Redefining model type 'COUNTER'" in caplog.text


def test_redefinition_does_not_touch_existing_models(keeper):
    keeper.define_type("counter", ["incr"])
    old = keeper.create_model("c1", {"type": "COUNTER", "key": "c1"})
    keeper.define_type("counter", ["decr"])
    new = keeper.create_model("c2", {"type": "COUNTER", "key": "c2"})
    assert "incr" in old.commands and "decr" not in old.commands
    assert "decr" in new.commands and "incr" not in new.commands


def test_define_types_bulk(keeper):
    entries = keeper.define_types(
        [
            {"type": "counter", "commands": ["incr"]},
            {"type": "flag"},
        ]
    )
    assert [e.name for e in entries] == ["COUNTER", "FLAG"]
    assert entries[1].commands == GENERIC_COMMANDS


def test_invalid_type_name(keeper):
    with pytest.raises(ValueError):
        keeper.define_type("---")


# ── create_model ─────────────────────────────────────────────


def test_create_model_returns_definition(keeper):
    model = keeper.create_model("post", {"type": "HASH", "key": "post:{postId}"})
    assert isinstance(model, ModelDefinition)
    assert model.name == "post"
    assert model.type == "HASH"
    assert model.key == "post:{postId}"
    assert model.template.placeholders == ("postId",)
    assert keeper.get_model("post") is model
    assert keeper.model("post") is model


def test_definitions_hash_by_identity(keeper):
    post = keeper.create_model("post", {"type": "HASH", "key": "post:{id}", "fields": {"a": "b"}})
    other = keeper.create_model("other", {"type": "HASH", "key": "post:{id}", "fields": {"a": "b"}})
    assert {post, other, keeper.model("post")} == {post, other}
    assert post != other


def test_type_lookup_accepts_enum_and_loose_names(keeper):
    a = keeper.create_model("a", {"type": ModelType.SORTED_SET, "key": "a"})
    b = keeper.create_model("b", {"type": "sortedSet", "key": "b"})
    assert a.type == b.type == "SORTED_SET"


def test_unknown_type(keeper):
    with pytest.raises(UnknownModelTypeError) as exc_info:
        keeper.create_model("bad", {"type": "NOPE", "key": "k"})
    assert exc_info.value.type_name == "NOPE"
    assert "HASH" in str(exc_info.value)
    assert keeper.get_model("bad") is None


def test_duplicate_name_keeps_first(keeper):
    first = keeper.create_model("post", {"type": "HASH", "key": "post:{id}"})
    with pytest.raises(DuplicateModelNameError) as exc_info:
        keeper.create_model("post", {"type": "STRING", "key": "other"})
    assert exc_info.value.name == "post"
    assert keeper.get_model("post") is first
    assert keeper.get_model("post").type == "HASH"


@pytest.mark.parametrize(
    "definition",
    [{"key": "k"}, {"type": "HASH"}, {"type": "HASH", "key": 5}, "not a mapping"],
)
def test_malformed_definition(keeper, definition):
    with pytest.raises(ModelConfigError) as exc_info:
        keeper.create_model("broken", definition)
    assert "broken" in str(exc_info.value)


def test_snake_case_command_filters(keeper):
    model = keeper.create_model(
        "counter",
        {"type": "STRING", "key": "c", "allowed_commands": ["incr", "get"]},
    )
    assert model.commands.effective == ("get", "incr")


def test_metadata_keeps_extra_keys(keeper):
    model = keeper.create_model(
        "post",
        {"type": "HASH", "key": "post:{id}", "fields": {"title": "t"}, "ttl": 60},
    )
    assert model.metadata == {"fields": {"title": "t"}, "ttl": 60}
    assert model.fields == {"title": "t"}
    with pytest.raises(TypeError):
        model.metadata["ttl"] = 1


def test_source_is_original_definition(keeper, model_definitions):
    keeper.create_models(model_definitions)
    assert keeper.model("post").source is model_definitions["post"]


def test_command_colliding_with_accessor_attribute(keeper):
    keeper.define_type("weird", ["gather"])
    with pytest.raises(ModelConfigError):
        keeper.create_model("w", {"type": "WEIRD", "key": "w"})


# ── create_models ────────────────────────────────────────────


def test_create_models(keeper, model_definitions):
    models = keeper.create_models(model_definitions)
    assert len(models) == len(model_definitions)
    assert [m.name for m in models] == list(model_definitions)
    assert keeper.list_models() == list(model_definitions)
    assert len(keeper.models) == len(model_definitions)


def test_create_models_aborts_without_rollback(keeper):
    definitions = {
        "a": {"type": "STRING", "key": "a"},
        "b": {"type": "NOPE", "key": "b"},
        "c": {"type": "STRING", "key": "c"},
    }
    with pytest.raises(UnknownModelTypeError):
        keeper.create_models(definitions)
    assert keeper.list_models() == ["a"]

    with pytest.raises(DuplicateModelNameError):
        keeper.create_models(definitions)


def test_concurrent_registration_single_winner(keeper):
    wins, losses = [], []
    barrier = threading.Barrier(8)

    def register():
        barrier.wait()
        try:
            wins.append(keeper.create_model("shared", {"type": "STRING", "key": "s"}))
        except DuplicateModelNameError:
            losses.append(1)

    threads = [threading.Thread(target=register) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(wins) == 1
    assert len(losses) == 7


# ── client / partition / bind ────────────────────────────────


def test_set_client_after_construction(model_definitions):
    keeper = Keeper()
    assert keeper.client is None
    client = InMemoryClient()
    keeper.set_client(client)
    keeper.create_models(model_definitions)
    assert keeper.bind("string").client is client


def test_partition_prefixes_keys(model_definitions):
    keeper = Keeper(InMemoryClient(), partition="h")
    keeper.create_models(model_definitions)
    assert keeper.bind("post", "1").key == "h:post:1"
    assert keeper.model("post").get_key("1") == "h:post:1"


def test_bind_unknown_model(keeper):
    with pytest.raises(ModelNotFoundError):
        keeper.bind("missing", 1)


def test_bind_by_definition(loaded_keeper):
    model = loaded_keeper.model("comment")
    accessor = loaded_keeper.bind(model, {"postId": 1, "commentId": 2})
    assert accessor.key == "post:1:comments:2"
    assert type(accessor) is model.accessor_class
