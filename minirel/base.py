from enum import Enum, auto

from minirel.mapper import Mapper, collect_declarations


class ObjectState(Enum):
    TRANSIENT = auto()
    PERSISTENT = auto()
    DELETED = auto()


def entity_id(entity):
    return entity.__dict__.get(entity._mapper.pk)


def is_persisted(entity):
    return entity._orm_state is ObjectState.PERSISTENT and entity_id(entity) is not None


def root_kind(kind):
    mapper = kind._mapper
    while mapper.parent:
        mapper = mapper.parent
    return mapper.cls


class Entity:
    _registry = {}

    def __repr__(self):
        pk_val = entity_id(self)
        return f"<{self.__class__.__name__}({self._mapper.pk}={'New' if pk_val is None else pk_val})>"

    def __init__(self, **kwargs):
        object.__setattr__(self, '_orm_state', ObjectState.TRANSIENT)
        object.__setattr__(self, '_store', None)
        object.__setattr__(self, '_readonly', False)
        object.__setattr__(self, '_associations', {})

        mapper = self._mapper
        for name in mapper.columns:
            object.__setattr__(self, name, None)
        for name, value in mapper.column_defaults().items():
            object.__setattr__(self, name, value)

        for key, value in kwargs.items():
            if key not in mapper.columns and key not in mapper.reflections:
                raise TypeError(f"{self.__class__.__name__} has no attribute '{key}'")
            setattr(self, key, value)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        columns, associations = collect_declarations(cls)

        # Meta is not inherited, every class names its own table
        meta_cls = cls.__dict__.get("Meta")
        meta_attrs = {}
        if meta_cls:
            for attr in dir(meta_cls):
                if not attr.startswith('_'):
                    meta_attrs[attr] = getattr(meta_cls, attr)

        cls._mapper = Mapper(cls, columns, associations, meta_attrs)
        Entity._registry[cls] = cls._mapper

    def __setattr__(self, name, value):
        mapper = self._mapper
        if name == mapper.pk and self._orm_state is ObjectState.PERSISTENT:
            current_id = self.__dict__.get(name)
            if current_id is not None and current_id != value:
                raise AttributeError(
                    f"Cannot change primary key '{name}' "
                    f"for {self.__class__.__name__} after it has been persisted."
                )

        object.__setattr__(self, name, value)

        # a foreign key written by hand invalidates whatever the slot cached
        assoc_name = mapper.foreign_keys.get(name)
        if assoc_name:
            slot = self._associations.get(assoc_name)
            if slot is not None:
                slot.reset()

    def association(self, name):
        """Return the reference slot for the belongs-to association ``name``."""
        slot = self._associations.get(name)
        if slot is None:
            reflection = self._mapper.reflections.get(name)
            if reflection is None:
                raise AttributeError(f"{self.__class__.__name__} has no belongs-to association '{name}'")

            from minirel.accessor import EntityAccessor
            from minirel.belongs_to import BelongsToAssociation

            slot = BelongsToAssociation(EntityAccessor(self, reflection.foreign_key), reflection)
            self._associations[name] = slot
        return slot

    def new_record(self):
        return self._orm_state is ObjectState.TRANSIENT

    def readonly(self):
        return self._readonly
