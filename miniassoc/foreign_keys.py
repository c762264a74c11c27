import logging
from dataclasses import dataclass
from typing import Optional

from miniassoc.errors import ConflictError, UnknownTargetKeyError
from miniassoc.orm_types import CASCADE, SET_NULL, AssociationKind, ForeignKey

logger = logging.getLogger("MiniAssoc")


@dataclass(frozen=True)
class ForeignKeySpec:
    name: str
    references: object
    target_key: Optional[str] = None
    on_delete: Optional[str] = None
    on_update: Optional[str] = None
    pk: Optional[bool] = None
    default_on_delete: str = SET_NULL
    alias: Optional[str] = None


class ForeignKeyPlan:
    """A validated foreign key waiting to be written onto its owner."""

    def __init__(self, owner, name, column, existing):
        self.owner = owner
        self.name = name
        self.column = column
        self.existing = existing

    def __repr__(self):
        state = "existing" if self.existing else "new"
        return f"<ForeignKeyPlan {self.owner.name}.{self.name} {state} {self.column}>"

    def apply(self):
        if not self.existing:
            self.owner.set_column(self.name, self.column)
            logger.debug(f"[FOREIGN KEY]: {self.owner.name}.{self.name} -> {self.column}")
        return self.column


class ForeignKeyResolver:
    def owner_for(self, kind, source, target):
        kind = AssociationKind(kind)
        if kind is AssociationKind.BELONGS_TO:
            return source
        if kind in (AssociationKind.HAS_ONE, AssociationKind.HAS_MANY):
            return target
        raise ValueError(f"{kind.value} keeps its foreign keys on a junction entity")

    def referenced_key(self, entity, key=None, source=None, target=None, alias=None):
        """Return (name, column) of the key a foreign key into `entity` points at."""
        if key is None:
            key = entity.pk
            if key is None:
                raise UnknownTargetKeyError(
                    f"{entity.name} has a composite primary key {entity.primary_keys}; a target key is required",
                    source=source, target=target, alias=alias,
                )
        column = entity.columns.get(key)
        if column is None:
            raise UnknownTargetKeyError(
                f"{entity.name} has no attribute '{key}' to reference",
                source=source, target=target, alias=alias,
            )
        return key, column

    def plan(self, owner, spec, source=None, target=None):
        """Validate `spec` against `owner` without touching it."""
        source = source or owner.name
        target = target or spec.references.name
        key, ref_col = self.referenced_key(spec.references, spec.target_key, source, target, spec.alias)

        if spec.references is owner and spec.name == key:
            raise ConflictError(
                f"Foreign key '{spec.name}' would reference itself on {owner.name}",
                source=source, target=target, alias=spec.alias,
            )

        on_update = spec.on_update or CASCADE
        existing = owner.columns.get(spec.name)

        if isinstance(existing, ForeignKey):
            if existing.same_reference(spec.references.name, key, ref_col.dtype):
                for label, wanted, current in (
                    ("on_delete", spec.on_delete, existing.on_delete),
                    ("on_update", spec.on_update, existing.on_update),
                ):
                    if wanted is not None and wanted != current:
                        raise ConflictError(
                            f"Foreign key '{spec.name}' on {owner.name} is already {label} {current}, not {wanted}",
                            source=source, target=target, alias=spec.alias,
                        )
                if spec.pk is not None and existing.pk != spec.pk:
                    return ForeignKeyPlan(owner, spec.name, existing.with_pk(spec.pk), existing=False)
                return ForeignKeyPlan(owner, spec.name, existing, existing=True)
            raise ConflictError(
                f"Foreign key '{spec.name}' on {owner.name} already references "
                f"{existing.target_entity}.{existing.target_column}, not {spec.references.name}.{key}",
                source=source, target=target, alias=spec.alias,
            )

        if existing is not None:
            if not existing.compatible_with(ref_col):
                raise ConflictError(
                    f"Attribute '{spec.name}' on {owner.name} is {existing.dtype.__name__}, "
                    f"but {spec.references.name}.{key} is {ref_col.dtype.__name__}",
                    source=source, target=target, alias=spec.alias,
                )
            pk = existing.pk if spec.pk is None else spec.pk
            nullable = existing.nullable and not pk
            on_delete = spec.on_delete or (spec.default_on_delete if nullable else CASCADE)
            column = ForeignKey.from_column(
                existing, spec.references.name, key, on_delete, on_update, pk=pk,
            )
            if pk:
                column.nullable = False
            return ForeignKeyPlan(owner, spec.name, column, existing=False)

        nullable = not spec.pk
        on_delete = spec.on_delete or (spec.default_on_delete if nullable else CASCADE)
        column = ForeignKey(
            spec.references.name, key, dtype=ref_col.dtype, pk=bool(spec.pk),
            nullable=nullable, on_delete=on_delete, on_update=on_update,
        )
        return ForeignKeyPlan(owner, spec.name, column, existing=False)

    def attach_foreign_key(self, owner, spec):
        return self.plan(owner, spec).apply()
