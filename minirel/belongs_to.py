import logging

from minirel.base import entity_id, is_persisted
from minirel.errors import DetachedOwnerError, NotFound, TypeMismatch
from minirel.proxy import ReferenceHandle, unwrap

logger = logging.getLogger("MiniRel")


class BelongsToAssociation(ReferenceHandle):
    """Reference slot for one owner and one belongs-to association.

    The target is resolved lazily from the owner's foreign key and cached
    until the slot is replaced or reset. When the association keeps a counter
    cache, moving a persisted owner between targets keeps the counters of both
    targets in step: the new target is incremented before the old one is
    decremented, so an interruption between the two calls over-counts rather
    than under-counts.
    """

    def __init__(self, owner, reflection, store=None):
        super().__init__(owner, reflection, store)
        self._updated = False

    @property
    def foreign_key(self):
        return self.reflection.foreign_key

    @property
    def target_type(self):
        return self.reflection.target_type

    @property
    def counter_cache_column(self):
        return self.reflection.counter_cache_column

    def create(self, attributes=None):
        record = self._require_store().create(self.target_type, attributes or {})
        return self.replace(record)

    def build(self, attributes=None):
        record = self._require_store().build(self.target_type, attributes or {})
        return self.replace(record)

    def replace(self, candidate):
        record = unwrap(candidate)
        counter = self.counter_cache_column
        current_fk = self.owner.get_foreign_key()
        owner_persisted = not self.owner.is_new_record()

        if record is None:
            if counter and owner_persisted and current_fk is not None:
                self._require_store().decrement_counter(self.target_type, counter, current_fk)

            self._target = None
            self.owner.set_foreign_key(None)
        else:
            target_type = self.target_type
            if not isinstance(record, target_type):
                raise TypeMismatch(target_type, type(record))

            record_id = entity_id(record)
            if counter and owner_persisted:
                store = self._require_store()
                # an unsaved record is counted once its key is written on save
                if is_persisted(record):
                    store.increment_counter(target_type, counter, record_id)
                if current_fk is not None:
                    store.decrement_counter(target_type, counter, current_fk)

            self._target = record
            if is_persisted(record):
                self.owner.set_foreign_key(record_id)
            self._updated = True

        logger.debug(f"[ASSOC REPLACE]: {self.owner!r}.{self.reflection.name} -> {self._target!r}")
        self.mark_loaded()
        return self._target

    def resolve(self):
        if self._loaded:
            return self._target

        self._target = None
        try:
            if self._foreign_key_present():
                self._target = self._find_target()
        finally:
            self.mark_loaded()
        return self._target

    def updated(self):
        return self._updated

    def _find_target(self):
        store = self._require_store()
        fk_val = self.owner.get_foreign_key()
        reflection = self.reflection
        try:
            target = store.find_by_identifier(
                self.target_type,
                fk_val,
                conditions=dict(reflection.conditions),
                include=list(reflection.include),
                readonly=reflection.readonly,
            )
        except NotFound:
            if reflection.required:
                raise
            logger.debug(f"[ASSOC LOAD]: {self.owner!r}.{reflection.name} -> missing id={fk_val}")
            return None

        logger.debug(f"[ASSOC LOAD]: {self.owner!r}.{reflection.name} -> {target!r}")
        return target

    def _foreign_key_present(self):
        return self.owner.get_foreign_key() is not None

    def _require_store(self):
        store = self.store
        if store is None:
            raise DetachedOwnerError(self.owner, self.reflection.name)
        return store
