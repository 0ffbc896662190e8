"""key_keeper — declarative models mapped onto key-value store keys.

Declare a model once (type, key template, command restrictions) and get
accessors that render the key from runtime params and expose only the
commands that make sense for the model's type.
"""

from key_keeper.accessor import Accessor, AccessorBuilder
from key_keeper.clients import StoreClient
from key_keeper.commands import CommandSet
from key_keeper.definition import ModelConfigSchema, ModelDefinition
from key_keeper.exceptions import (
    DuplicateModelNameError,
    InvalidParamTypeError,
    KeeperError,
    KeyResolutionError,
    ModelConfigError,
    ModelNotFoundError,
    ParamCountMismatchError,
    StoreError,
    UnknownModelTypeError,
)
from key_keeper.keeper import Keeper
from key_keeper.model_types import ModelType, TypeCatalog, TypeEntry
from key_keeper.template import Failed, KeyTemplate, Ready

__all__ = [
    "Accessor",
    "AccessorBuilder",
    "CommandSet",
    "DuplicateModelNameError",
    "Failed",
    "InvalidParamTypeError",
    "Keeper",
    "KeeperError",
    "KeyResolutionError",
    "KeyTemplate",
    "ModelConfigError",
    "ModelConfigSchema",
    "ModelDefinition",
    "ModelNotFoundError",
    "ModelType",
    "ParamCountMismatchError",
    "Ready",
    "StoreClient",
    "StoreError",
    "TypeCatalog",
    "TypeEntry",
    "UnknownModelTypeError",
]
