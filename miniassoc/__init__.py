# miniassoc - association resolution for a lightweight data-mapping layer
from miniassoc.registry import Registry
from miniassoc.entity import EntityType
from miniassoc.association import Association
from miniassoc.accessors import AccessorOperation, AccessorSet
from miniassoc.options import AssociationOptions, RegistryConfig
from miniassoc.orm_types import AssociationKind, Boolean, Column, ForeignKey, Number, Text
from miniassoc.errors import (
    AmbiguousSelfReferenceError,
    AssociationError,
    ConflictError,
    FrozenRegistryError,
    InvalidOptionsError,
    MissingThroughError,
    UnknownEntityError,
    UnknownTargetKeyError,
)

__version__ = "0.1.0"
__all__ = [
    "Registry", "EntityType", "Association", "AccessorOperation", "AccessorSet",
    "AssociationOptions", "RegistryConfig", "AssociationKind",
    "Column", "Text", "Number", "Boolean", "ForeignKey",
    "AssociationError", "ConflictError", "MissingThroughError", "AmbiguousSelfReferenceError",
    "UnknownTargetKeyError", "InvalidOptionsError", "UnknownEntityError", "FrozenRegistryError",
]
