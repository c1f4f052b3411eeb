class Column:
    def __init__(self, dtype, pk=False, nullable=True, default=None):
        self.dtype = dtype
        self.pk = pk
        self.nullable = nullable
        self.default = default

    def __repr__(self):
        parts = [self.dtype.__name__]
        if self.pk:
            parts.append("pk")
        if self.default is not None:
            parts.append(f"default={self.default!r}")
        return f"<{self.__class__.__name__} {', '.join(parts)}>"


class Text(Column):
    def __init__(self, pk=False, nullable=True, default=None):
        super().__init__(str, pk, nullable, default)


class Number(Column):
    def __init__(self, pk=False, nullable=True, default=None):
        super().__init__(int, pk, nullable, default)


class ForeignKey(Column):
    """Column added to the owner for every belongs-to association."""

    def __init__(self, association, target_column="id", nullable=True):
        super().__init__(int, pk=False, nullable=nullable)
        self.association = association
        self.target_column = target_column


class BelongsTo:
    """Declares a belongs-to association in an entity class body.

        class Comment(Entity):
            id = Number(pk=True)
            post = BelongsTo("Post", counter_cache=True)

    Reading ``comment.post`` resolves the target lazily, assigning to it
    replaces the target. The association handle itself is available through
    ``comment.association("post")``.
    """

    def __init__(self, target, **options):
        self.target = target
        self.options = options
        self.name = None

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance.association(self.name).target

    def __set__(self, instance, value):
        instance.association(self.name).replace(value)

    def __repr__(self):
        target = getattr(self.target, "__name__", self.target)
        return f"<BelongsTo {self.name} target={target}>"
