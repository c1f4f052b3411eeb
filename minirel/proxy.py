class ReferenceHandle:
    """Base of association handles: owns the cached target and the loaded flag.

    A handle can be passed anywhere an entity is accepted by ``replace``;
    ``unwrap()`` turns either side of that union into the plain entity.
    """

    def __init__(self, owner, reflection, store=None):
        self.owner = owner
        self.reflection = reflection
        self._store = store
        self._target = None
        self._loaded = False

    @property
    def store(self):
        return self._store if self._store is not None else self.owner.store

    @property
    def target(self):
        return self.resolve()

    def resolve(self):
        raise NotImplementedError

    def loaded(self):
        return self._loaded

    def mark_loaded(self):
        self._loaded = True

    def reset(self):
        self._target = None
        self._loaded = False

    def reload(self):
        self.reset()
        return self.resolve()

    def unwrap(self):
        return self.target

    def __bool__(self):
        return self.target is not None

    def __repr__(self):
        state = repr(self._target) if self._loaded else "not loaded"
        return f"<{self.__class__.__name__} {self.reflection.name} -> {state}>"


def unwrap(candidate):
    if isinstance(candidate, ReferenceHandle):
        return candidate.unwrap()
    return candidate
