"""
Configuration of belongs-to associations.

Options given to ``BelongsTo(...)`` are validated here once, when the owning
entity class is defined, so a typo in an option name fails at import time
instead of on the first load.
"""
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from minirel.errors import ConfigurationError

_IDENT = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')


def underscore(name):
    """CamelCase -> camel_case"""
    name = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
    return re.sub(r'([a-z\d])([A-Z])', r'\1_\2', name).lower()


class BelongsToReflection(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    name: str
    target: Any
    owner_table: str | None = None
    foreign_key: str | None = None
    counter_cache: bool | str = False
    conditions: dict[str, Any] = Field(default_factory=dict)
    include: list[str] = Field(default_factory=list)
    readonly: bool = False
    required: bool = False

    @field_validator("name", "foreign_key")
    @classmethod
    def check_identifier(cls, value):
        if value is not None and not _IDENT.match(value):
            raise ValueError(f"'{value}' is not a valid attribute name")
        return value

    @field_validator("target")
    @classmethod
    def check_target(cls, value):
        if isinstance(value, str) and value:
            return value
        if isinstance(value, type):
            return value
        raise ValueError("target must be an entity class or its class/table name")

    @field_validator("include", mode="before")
    @classmethod
    def listify_include(cls, value):
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("counter_cache")
    @classmethod
    def check_counter_cache(cls, value):
        if isinstance(value, str) and not _IDENT.match(value):
            raise ValueError(f"'{value}' is not a valid counter cache column")
        return value

    @model_validator(mode="after")
    def derive_foreign_key(self):
        if self.foreign_key is None:
            self.foreign_key = f"{self.name}_id"
        if self.foreign_key == self.name:
            raise ValueError(f"foreign key '{self.foreign_key}' clashes with the association name")
        if self.counter_cache is True and not self.owner_table:
            raise ValueError("counter_cache=True needs the owner table name to derive the column")
        return self

    @classmethod
    def from_declaration(cls, name, declaration, owner_table):
        try:
            return cls(name=name, target=declaration.target, owner_table=owner_table, **declaration.options)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid belongs-to association '{name}' on {owner_table}: {e}") from e

    @property
    def counter_cache_column(self):
        if self.counter_cache is True:
            return f"{self.owner_table}_count"
        return self.counter_cache or None

    @property
    def target_type(self):
        from minirel.mapper import resolve_target_class

        target_cls = resolve_target_class(self.target)
        if target_cls is None:
            raise ConfigurationError(f"Cannot resolve target '{self.target}' of association '{self.name}'")
        return target_cls

    def __repr__(self):
        target = getattr(self.target, "__name__", self.target)
        parts = [f"target={target}", f"foreign_key={self.foreign_key}"]
        if self.counter_cache_column:
            parts.append(f"counter_cache={self.counter_cache_column}")
        if self.required:
            parts.append("required")
        return f"<BelongsToReflection {self.name} {', '.join(parts)}>"
