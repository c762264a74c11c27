from enum import Enum

CASCADE = "CASCADE"
SET_NULL = "SET NULL"
SET_DEFAULT = "SET DEFAULT"
RESTRICT = "RESTRICT"
NO_ACTION = "NO ACTION"

REFERENTIAL_ACTIONS = (CASCADE, SET_NULL, SET_DEFAULT, RESTRICT, NO_ACTION)


class AssociationKind(str, Enum):
    BELONGS_TO = "belongsTo"
    HAS_ONE = "hasOne"
    HAS_MANY = "hasMany"
    BELONGS_TO_MANY = "belongsToMany"

    @property
    def is_plural(self):
        return self in (AssociationKind.HAS_MANY, AssociationKind.BELONGS_TO_MANY)


class Column:
    def __init__(self, dtype, pk=False, nullable=True, unique=False, default=None):
        self.dtype = dtype
        self.pk = pk
        self.nullable = nullable
        self.unique = unique
        self.default = default
        # Surrogate keys added by the registry, not by the caller.
        self.auto = False

    def __repr__(self):
        flags = []
        if self.pk:
            flags.append("pk")
        if not self.nullable:
            flags.append("not null")
        if self.unique:
            flags.append("unique")
        suffix = f" {' '.join(flags)}" if flags else ""
        return f"<{self.__class__.__name__} {self.dtype.__name__}{suffix}>"

    def compatible_with(self, other):
        return self.dtype is other.dtype


class Text(Column):
    def __init__(self, pk=False, nullable=True, unique=False, default=None):
        super().__init__(str, pk, nullable, unique, default)


class Number(Column):
    def __init__(self, pk=False, nullable=True, unique=False, default=None):
        super().__init__(int, pk, nullable, unique, default)


class Boolean(Column):
    def __init__(self, pk=False, nullable=True, unique=False, default=None):
        super().__init__(bool, pk, nullable, unique, default)


class ForeignKey(Column):
    def __init__(self, target_entity, target_column, dtype=int, pk=False, nullable=True, unique=False,
                 default=None, on_delete=SET_NULL, on_update=CASCADE):
        super().__init__(dtype, pk=pk, nullable=nullable, unique=unique, default=default)
        self.target_entity = target_entity
        self.target_column = target_column
        self.on_delete = on_delete
        self.on_update = on_update

    def __repr__(self):
        return (
            f"<ForeignKey {self.target_entity}.{self.target_column} {self.dtype.__name__} "
            f"on_delete={self.on_delete} on_update={self.on_update}{' pk' if self.pk else ''}>"
        )

    @property
    def references(self):
        return (self.target_entity, self.target_column)

    def same_reference(self, target_entity, target_column, dtype):
        return self.references == (target_entity, target_column) and self.dtype is dtype

    def with_pk(self, pk):
        return ForeignKey(
            self.target_entity, self.target_column, dtype=self.dtype, pk=pk,
            nullable=self.nullable and not pk, unique=self.unique, default=self.default,
            on_delete=self.on_delete, on_update=self.on_update,
        )

    @classmethod
    def from_column(cls, column, target_entity, target_column, on_delete, on_update, pk=None):
        """Upgrade a caller-declared column to a foreign key, keeping its flags."""
        return cls(
            target_entity, target_column, dtype=column.dtype,
            pk=column.pk if pk is None else pk,
            nullable=column.nullable, unique=column.unique, default=column.default,
            on_delete=on_delete, on_update=on_update,
        )
