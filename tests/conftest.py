"""Shared test fixtures."""

import pytest

from key_keeper import Keeper, ModelType
from key_keeper.clients.memory import InMemoryClient

MODEL_DEFINITIONS = {
    "post": {
        "type": ModelType.HASH,
        "key": "post:{postId}",
        "fields": {
            "count": {
                "like": "like:count",
                "comment": "comments:count",
            }
        },
    },
    "postCommentsIndex": {
        "type": ModelType.STRING,
        "key": "post:{postId}:comments:index",
        "disabledCommands": ["decr"],
    },
    "postCommentsCount": {
        "type": ModelType.STRING,
        "key": "post:{postId}:comments:count",
    },
    "comment": {
        "type": ModelType.HASH,
        "key": "post:{postId}:comments:{commentId}",
        "allowedCommands": ["hget", "hset", "hgetall"],
    },
    "string": {
        "type": ModelType.STRING,
        "key": "string",
    },
}


@pytest.fixture
def client():
    return InMemoryClient()


@pytest.fixture
def keeper(client):
    return Keeper(client)


@pytest.fixture
def model_definitions():
    return MODEL_DEFINITIONS


@pytest.fixture
def loaded_keeper(keeper, model_definitions):
    keeper.create_models(model_definitions)
    return keeper


class Recorder:
    """Collects ``(error, result)`` pairs delivered to command callbacks."""

    def __init__(self):
        self.calls = []

    def __call__(self, error, result):
        self.calls.append((error, result))


@pytest.fixture
def recorder():
    return Recorder()
