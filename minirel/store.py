import copy
import logging
from abc import ABC, abstractmethod
from collections import defaultdict

from minirel.base import ObjectState, entity_id, root_kind
from minirel.errors import ConfigurationError, NotFound, ReadOnlyRecord
from minirel.identity_map import IdentityMap
from minirel.mapper import Mapper


class EntityStore(ABC):
    """What a reference slot needs from the persistence side.

    ``find_by_identifier`` raises ``NotFound`` on a miss; the slot decides
    whether that is an error for its association.
    """

    @abstractmethod
    def create(self, kind, attributes):
        pass

    @abstractmethod
    def build(self, kind, attributes):
        pass

    @abstractmethod
    def find_by_identifier(self, kind, identifier, conditions=None, include=None, readonly=False):
        pass

    @abstractmethod
    def increment_counter(self, kind, counter_attribute, identifier):
        pass

    @abstractmethod
    def decrement_counter(self, kind, counter_attribute, identifier):
        pass

    def find(self, kind, identifier):
        return self.find_by_identifier(kind, identifier)


class MemoryStore(EntityStore):
    logger = logging.getLogger("MiniRel")
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO)

    def __init__(self):
        Mapper.finalize_mappers()

        self.identity_map = IdentityMap()
        self._sequences = defaultdict(int)

    def _log(self, op, msg):
        self.logger.info(f"[STORE {op}]: {msg}")

    def _instantiate(self, kind, attributes):
        entity = kind(**dict(attributes or {}))
        object.__setattr__(entity, '_store', self)
        return entity

    def build(self, kind, attributes=None):
        entity = self._instantiate(kind, attributes)
        self._log("BUILD", f"{kind.__name__} {dict(attributes or {})}")
        return entity

    def create(self, kind, attributes=None):
        entity = self._instantiate(kind, attributes)
        self._log("CREATE", f"{kind.__name__} {dict(attributes or {})}")
        return self.save(entity)

    def save(self, entity):
        if entity.readonly():
            raise ReadOnlyRecord(entity)
        if entity._store is None:
            object.__setattr__(entity, '_store', self)

        was_new = entity.new_record()
        mapper = entity._mapper

        for name in mapper.reflections:
            slot = entity._associations.get(name)
            if slot is None or not slot.loaded():
                continue
            target = slot.target
            if target is None:
                continue
            if target.new_record():
                self.save(target)
            if slot.owner.get_foreign_key() != entity_id(target):
                slot.owner.set_foreign_key(entity_id(target))
                # the old key was released by replace(); new owners are counted below
                counter = mapper.reflections[name].counter_cache_column
                if counter and not was_new:
                    self.increment_counter(slot.target_type, counter, entity_id(target))

        if was_new:
            self._assign_identifier(entity)
            object.__setattr__(entity, '_orm_state', ObjectState.PERSISTENT)
            self.identity_map.add(root_kind(type(entity)), entity_id(entity), entity)
            self._log("INSERT", repr(entity))

            for reflection in mapper.reflections.values():
                fk_val = entity.__dict__.get(reflection.foreign_key)
                if reflection.counter_cache_column and fk_val is not None:
                    self.increment_counter(reflection.target_type, reflection.counter_cache_column, fk_val)
        else:
            self._log("UPDATE", repr(entity))
        return entity

    def _assign_identifier(self, entity):
        kind = root_kind(type(entity))
        pk = entity._mapper.pk
        pk_val = entity.__dict__.get(pk)
        if pk_val is None:
            self._sequences[kind] += 1
            object.__setattr__(entity, pk, self._sequences[kind])
        else:
            if self.identity_map.get(kind, pk_val) is not None:
                raise ValueError(f"{kind.__name__} with {pk}={pk_val} already exists")
            if isinstance(pk_val, int):
                self._sequences[kind] = max(self._sequences[kind], pk_val)

    def destroy(self, entity):
        if entity._orm_state is not ObjectState.PERSISTENT:
            return entity

        for reflection in entity._mapper.reflections.values():
            fk_val = entity.__dict__.get(reflection.foreign_key)
            if reflection.counter_cache_column and fk_val is not None:
                self.decrement_counter(reflection.target_type, reflection.counter_cache_column, fk_val)

        self.identity_map.remove(root_kind(type(entity)), entity_id(entity))
        object.__setattr__(entity, '_orm_state', ObjectState.DELETED)
        self._log("DELETE", repr(entity))
        return entity

    def find_by_identifier(self, kind, identifier, conditions=None, include=None, readonly=False):
        conditions = conditions or {}
        entity = self.identity_map.get(root_kind(kind), identifier)
        if entity is None or not isinstance(entity, kind) or not self._matches(entity, conditions):
            self._log("FIND", f"{kind.__name__} id={identifier} conditions={conditions} -> miss")
            raise NotFound(kind, identifier, conditions)

        self._log("FIND", f"{kind.__name__} id={identifier} conditions={conditions}")
        if readonly:
            entity = copy.copy(entity)
            object.__setattr__(entity, '_associations', {})
            object.__setattr__(entity, '_readonly', True)

        for name in include or []:
            if name not in entity._mapper.reflections:
                raise ConfigurationError(f"{kind.__name__} has no association '{name}' to include")
            entity.association(name).resolve()
        return entity

    def _matches(self, entity, conditions):
        for name, value in conditions.items():
            if name not in entity._mapper.columns:
                raise ConfigurationError(f"Unknown condition column '{name}' for {type(entity).__name__}")
            if entity.__dict__.get(name) != value:
                return False
        return True

    def all(self, kind):
        return [e for e in self.identity_map.of_kind(root_kind(kind)) if isinstance(e, kind)]

    def increment_counter(self, kind, counter_attribute, identifier):
        self._update_counter(kind, counter_attribute, identifier, 1)

    def decrement_counter(self, kind, counter_attribute, identifier):
        self._update_counter(kind, counter_attribute, identifier, -1)

    def _update_counter(self, kind, counter_attribute, identifier, delta):
        if counter_attribute not in kind._mapper.columns:
            raise ConfigurationError(f"{kind.__name__} has no counter column '{counter_attribute}'")

        op = "+1" if delta > 0 else "-1"
        entity = self.identity_map.get(root_kind(kind), identifier)
        if entity is None:
            self.logger.debug(f"[COUNTER {op}]: {kind.__name__}.{counter_attribute} id={identifier} matched nothing")
            return

        current = entity.__dict__.get(counter_attribute) or 0
        object.__setattr__(entity, counter_attribute, current + delta)
        self._log(f"COUNTER {op}", f"{kind.__name__}.{counter_attribute} id={identifier} -> {current + delta}")
