# minirel - belongs-to associations for a lightweight Python ORM
from minirel.base import Entity, ObjectState
from minirel.orm_types import Text, Number, BelongsTo
from minirel.reflection import BelongsToReflection
from minirel.proxy import ReferenceHandle, unwrap
from minirel.belongs_to import BelongsToAssociation
from minirel.accessor import ForeignKeyAccessor, EntityAccessor
from minirel.store import EntityStore, MemoryStore
from minirel.errors import (
    MiniRelError, ConfigurationError, AssociationError, TypeMismatch,
    DetachedOwnerError, NotFound, ReadOnlyRecord,
)

__version__ = "0.1.0"
__all__ = [
    "Entity", "ObjectState", "Text", "Number", "BelongsTo", "BelongsToReflection",
    "ReferenceHandle", "unwrap", "BelongsToAssociation", "ForeignKeyAccessor", "EntityAccessor",
    "EntityStore", "MemoryStore", "MiniRelError", "ConfigurationError", "AssociationError",
    "TypeMismatch", "DetachedOwnerError", "NotFound", "ReadOnlyRecord",
]
