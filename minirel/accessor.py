from abc import ABC, abstractmethod


class ForeignKeyAccessor(ABC):
    """Owner-side view a reference slot works through.

    The slot never touches the owner directly: it reads and writes the foreign
    key, asks whether the owner is still unsaved, and finds the store the
    owner is attached to, all through this interface.
    """

    store = None

    @abstractmethod
    def get_foreign_key(self):
        pass

    @abstractmethod
    def set_foreign_key(self, value):
        pass

    @abstractmethod
    def is_new_record(self):
        pass


class EntityAccessor(ForeignKeyAccessor):
    def __init__(self, owner, foreign_key):
        self.owner = owner
        self.foreign_key = foreign_key

    def __repr__(self):
        return repr(self.owner)

    @property
    def store(self):
        return self.owner._store

    def get_foreign_key(self):
        return self.owner.__dict__.get(self.foreign_key)

    def set_foreign_key(self, value):
        # bypasses Entity.__setattr__, which would reset the slot doing the write
        object.__setattr__(self.owner, self.foreign_key, value)

    def is_new_record(self):
        return self.owner.new_record()
