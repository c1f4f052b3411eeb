class MiniRelError(Exception):
    """Base class for every error raised by minirel."""


class ConfigurationError(MiniRelError, ValueError):
    """Invalid association or entity declaration."""


class AssociationError(MiniRelError):
    pass


class TypeMismatch(AssociationError, TypeError):
    def __init__(self, expected, got):
        self.expected = expected
        self.got = got
        super().__init__(f"{expected.__name__} expected, got {got.__name__}")


class DetachedOwnerError(AssociationError):
    def __init__(self, owner, association):
        self.owner = owner
        self.association = association
        super().__init__(
            f"Cannot load association '{association}' of {owner!r}: owner is not attached to a store"
        )


class NotFound(MiniRelError, LookupError):
    def __init__(self, kind, identifier, conditions=None):
        self.kind = kind
        self.identifier = identifier
        self.conditions = conditions or {}
        msg = f"Couldn't find {kind.__name__} with id={identifier}"
        if self.conditions:
            msg += f" and conditions {self.conditions}"
        super().__init__(msg)


class ReadOnlyRecord(MiniRelError):
    def __init__(self, entity):
        self.entity = entity
        super().__init__(f"{entity!r} was loaded as readonly and cannot be saved")
