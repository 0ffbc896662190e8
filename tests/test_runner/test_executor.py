"""Tests for the runner executor."""

import pytest

from key_keeper.clients.memory import InMemoryClient
from key_keeper.runner.executor import Executor
from key_keeper.runner.schema import RunnerInput

MODELS = {
    "post": {"type": "HASH", "key": "post:{postId}"},
    "postCommentsIndex": {
        "type": "STRING",
        "key": "post:{postId}:comments:index",
        "disabledCommands": ["decr"],
    },
    "comment": {
        "type": "HASH",
        "key": "post:{postId}:comments:{commentId}",
        "allowedCommands": ["hget", "hset", "hgetall"],
    },
    "tags": {"type": "SET", "key": "tags:{postId}"},
    "string": {"type": "STRING", "key": "string"},
}


def make_input(commands, **extra):
    return RunnerInput.model_validate({"models": MODELS, "commands": commands, **extra})


class TestExecute:
    """End-to-end runs against an injected in-memory client."""

    @pytest.fixture
    def client(self):
        return InMemoryClient()

    @pytest.fixture
    def executor(self, client):
        return Executor(client=client)

    async def test_runs_commands_in_order(self, executor):
        """Test that results come back in input order with resolved keys."""
        input_data = make_input(
            [
                {"model": "post", "params": "1", "command": "hset", "args": ["title", "hi"]},
                {"model": "post", "params": {"postId": 1}, "command": "hget", "args": ["title"]},
                {"model": "string", "command": "set", "args": ["v"]},
                {"model": "string", "command": "GET"},
            ]
        )

        output = await executor.execute(input_data)

        assert output.success
        assert [r.result for r in output.results] == [1, "hi", True, "v"]
        assert [r.key for r in output.results] == ["post:1", "post:1", "string", "string"]
        assert output.results[3].command == "get"

    async def test_kwargs_are_forwarded(self, executor, client):
        """Test that command kwargs reach the client."""
        input_data = make_input(
            [
                {
                    "model": "post",
                    "params": [7],
                    "command": "hset",
                    "kwargs": {"mapping": {"a": 1, "b": 2}},
                }
            ]
        )

        output = await executor.execute(input_data)

        assert output.results[0].result == 2
        assert await client.hgetall("post:7") == {"a": "1", "b": "2"}

    async def test_sets_become_sorted_lists(self, executor):
        """Test that set results are JSON friendly."""
        input_data = make_input(
            [
                {"model": "tags", "params": 1, "command": "sadd", "args": ["b", "a"]},
                {"model": "tags", "params": 1, "command": "smembers"},
            ]
        )

        output = await executor.execute(input_data)

        assert output.results[1].result == ["a", "b"]

    async def test_delete_alias(self, executor, client):
        """Test that 'delete' runs the 'del' command."""
        await client.set("string", "x")
        output = await executor.execute(make_input([{"model": "string", "command": "delete"}]))

        assert output.results[0].command == "del"
        assert output.results[0].result == 1

    async def test_invalid_params_fail_only_that_command(self, executor):
        """Test that a key resolution error is reported per command."""
        input_data = make_input(
            [
                {"model": "comment", "params": {"postId": 1}, "command": "hget", "args": ["body"]},
                {"model": "string", "command": "set", "args": ["ok"]},
            ]
        )

        output = await executor.execute(input_data)

        assert not output.success
        failed, passed = output.results
        assert failed.success is False
        assert failed.key is None
        assert failed.error_type == "ParamCountMismatchError"
        assert "commentId" in failed.error
        assert passed.success is True

    async def test_disallowed_command(self, executor):
        """Test that commands outside the model's set are rejected."""
        input_data = make_input(
            [
                {"model": "postCommentsIndex", "params": 1, "command": "decr"},
                {"model": "comment", "params": [1, 2], "command": "hdel", "args": ["x"]},
            ]
        )

        output = await executor.execute(input_data)

        assert [r.error_type for r in output.results] == ["CommandNotAllowed", "CommandNotAllowed"]
        assert output.results[0].key == "post:1:comments:index"

    async def test_store_error_is_reported(self, executor, client):
        """Test that client failures are reported per command."""
        await client.set("string", "not a number")
        output = await executor.execute(make_input([{"model": "string", "command": "incr"}]))

        assert output.results[0].error_type == "StoreError"
        assert "not an integer" in output.results[0].error

    async def test_unknown_model_in_command(self, executor):
        """Test that commands on unregistered models fail individually."""
        output = await executor.execute(make_input([{"model": "ghost", "command": "get"}]))

        assert output.success is False
        assert output.results[0].error_type == "ModelNotFoundError"

    async def test_partition(self, executor, client):
        """Test that the client partition prefixes every key."""
        input_data = make_input(
            [{"model": "string", "command": "set", "args": ["v"]}],
            client={"partition": "tenant"},
        )

        output = await executor.execute(input_data)

        assert output.results[0].key == "tenant:string"
        assert await client.get("tenant:string") == "v"

    async def test_extra_types(self, executor):
        """Test that types declared in the input can back models."""
        input_data = RunnerInput.model_validate(
            {
                "types": [{"type": "counter", "commands": ["incr", "get"]}],
                "models": {"visits": {"type": "COUNTER", "key": "visits:{page}"}},
                "commands": [
                    {"model": "visits", "params": "home", "command": "incr"},
                    {"model": "visits", "params": "home", "command": "set", "args": ["1"]},
                ],
            }
        )

        output = await executor.execute(input_data)

        assert output.results[0].result == 1
        assert output.results[1].error_type == "CommandNotAllowed"

    async def test_plugin_registers_types(self, executor, tmp_path):
        """Test that a plugin's register(keeper) runs before models are created."""
        plugin = tmp_path / "types.py"
        plugin.write_text(
            "def register(keeper):\n"
            "    keeper.define_type('flag', ['get', 'set'])\n"
        )
        input_data = RunnerInput.model_validate(
            {
                "plugin_path": str(plugin),
                "models": {"feature": {"type": "FLAG", "key": "feature:{name}"}},
                "commands": [
                    {"model": "feature", "params": "beta", "command": "set", "args": ["on"]},
                ],
            }
        )

        output = await executor.execute(input_data)

        assert output.success
        assert output.results[0].key == "feature:beta"


class TestSetupFailures:
    """Failures that abort the whole run."""

    async def test_unknown_model_type(self):
        input_data = RunnerInput.model_validate(
            {"models": {"bad": {"type": "NOPE", "key": "k"}}, "commands": []}
        )

        output = await Executor(client=InMemoryClient()).execute(input_data)

        assert output.success is False
        assert output.error_type == "UnknownModelTypeError"
        assert output.results == []

    async def test_missing_plugin(self, tmp_path):
        input_data = RunnerInput(plugin_path=str(tmp_path / "missing.py"))

        output = await Executor(client=InMemoryClient()).execute(input_data)

        assert output.error_type == "PluginLoadError"

    async def test_unknown_client_type(self):
        input_data = RunnerInput.model_validate({"client": {"type": "nope"}})

        output = await Executor().execute(input_data)

        assert output.success is False
        assert output.error_type == "ClientFactoryError"
        assert "memory" in output.error

    async def test_memory_client_from_config(self):
        """Test that the default configuration needs no injected client."""
        output = await Executor().execute(
            make_input(
                [
                    {"model": "string", "command": "set", "args": ["v"]},
                    {"model": "string", "command": "get"},
                ]
            )
        )

        assert output.success
        assert output.results[1].result == "v"
