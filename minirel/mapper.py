from minirel.errors import ConfigurationError
from minirel.orm_types import BelongsTo, Column, ForeignKey
from minirel.reflection import BelongsToReflection, underscore


def resolve_target_class(target):
    """Entity class, class name or table name -> entity class (None when unknown yet)."""
    if isinstance(target, type) and hasattr(target, "_mapper"):
        return target
    if isinstance(target, str):
        from minirel.base import Entity
        for cls, mapper in Entity._registry.items():
            if cls.__name__ == target or mapper.table_name == target:
                return cls
    return None


class Mapper:
    def __init__(self, cls, columns, associations, meta_attrs):
        self.cls = cls
        self.meta = meta_attrs or {}
        self.pk = None
        self.parent = None
        self.declared_columns = dict(columns)
        self.columns = {}
        self.reflections = {}
        self.foreign_keys = {}

        self._resolve_parent()
        self._resolve_table_name()
        self._resolve_columns()
        self._resolve_associations(associations)
        self._resolve_pk()

    def __repr__(self):
        cols = ", ".join(self.columns.keys())
        assocs = ", ".join(self.reflections.keys())
        return (
            f"<Mapper class={self.cls.__name__} table={self.table_name} "
            f"columns=[{cols}] pk={self.pk} belongs_to=[{assocs}]>"
        )

    def _resolve_parent(self):
        for base in self.cls.__bases__:
            if hasattr(base, "_mapper"):
                self.parent = base._mapper
                return

    def _resolve_table_name(self):
        self.table_name = self.meta.get("table_name", underscore(self.cls.__name__) + "s")
        if not isinstance(self.table_name, str) or not self.table_name:
            raise ConfigurationError(f"Invalid table name for {self.cls.__name__}: {self.table_name!r}")

    def _resolve_columns(self):
        if self.parent:
            self.columns.update(self.parent.columns)
            self.reflections.update(self.parent.reflections)
            self.foreign_keys.update(self.parent.foreign_keys)
        self.columns.update(self.declared_columns)

    def _resolve_associations(self, associations):
        for name, declaration in associations.items():
            reflection = BelongsToReflection.from_declaration(name, declaration, self.table_name)
            fk_name = reflection.foreign_key
            existing = self.cls.__dict__.get(fk_name)
            if existing is not None and not isinstance(existing, Column):
                raise ConfigurationError(
                    f"Foreign key '{fk_name}' of {self.cls.__name__}.{name} clashes with another attribute"
                )
            if fk_name in self.reflections or fk_name in associations:
                raise ConfigurationError(
                    f"Foreign key '{fk_name}' of {self.cls.__name__}.{name} clashes with an association"
                )
            if fk_name not in self.columns:
                self.columns[fk_name] = ForeignKey(name)
            self.reflections[name] = reflection
            self.foreign_keys[fk_name] = name

    def _resolve_pk(self):
        pk_cols = [name for name, col in self.declared_columns.items() if col.pk]
        if pk_cols:
            self.pk = pk_cols[0]
        elif self.parent:
            self.pk = self.parent.pk
        else:
            raise ConfigurationError(f"Class {self.cls.__name__} has no primary key defined")

    def column_defaults(self):
        return {
            name: col.default
            for name, col in self.columns.items()
            if col.default is not None
        }

    @staticmethod
    def finalize_mappers():
        """Resolve every deferred association target; fails on the first unknown one."""
        from minirel.base import Entity

        for mapper in Entity._registry.values():
            for name, reflection in mapper.reflections.items():
                if resolve_target_class(reflection.target) is None:
                    raise ConfigurationError(
                        f"Cannot resolve association target after all models loaded: "
                        f"{mapper.cls.__name__}.{name} -> {reflection.target}"
                    )


def collect_declarations(cls):
    columns = {
        name: col
        for name, col in cls.__dict__.items()
        if isinstance(col, Column)
    }
    associations = {
        name: decl
        for name, decl in cls.__dict__.items()
        if isinstance(decl, BelongsTo)
    }
    return columns, associations
