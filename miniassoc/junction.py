import logging
from dataclasses import dataclass
from typing import Any, Optional

from miniassoc.entity import EntityType, check_meta
from miniassoc.errors import ConflictError, UnknownEntityError
from miniassoc.foreign_keys import ForeignKeyResolver, ForeignKeySpec
from miniassoc.naming import key_name
from miniassoc.orm_types import CASCADE, ForeignKey

logger = logging.getLogger("MiniAssoc")


@dataclass(frozen=True)
class JunctionSpec:
    source: Any
    target: Any
    through: Any
    foreign_key: Optional[str] = None
    other_key: Optional[str] = None
    source_key: Optional[str] = None
    target_key: Optional[str] = None
    on_delete: Optional[str] = None
    on_update: Optional[str] = None
    # name used for the default other key: the alias singular, else the target's singular
    other_prefix: Optional[str] = None
    alias: Optional[str] = None


class JunctionPlan:
    def __init__(self, registry, junction, created, keys, composite, drop_columns):
        self.registry = registry
        self.junction = junction
        self.created = created
        self.keys = keys
        self.composite = composite
        self.drop_columns = drop_columns

    @property
    def foreign_key(self):
        return self.keys[0].name

    @property
    def other_key(self):
        return self.keys[1].name

    def apply(self):
        junction = self.junction
        if self.created:
            self.registry.add_entity(junction)
            logger.info(f"[JUNCTION]: created {junction.name}({self.foreign_key}, {self.other_key})")
        junction.check_open()
        junction.is_junction = True
        for name in self.drop_columns:
            junction.drop_column(name)
        for key in self.keys:
            key.apply()
        junction.junction_keys = {key.name: key.column.target_entity for key in self.keys}
        if self.composite:
            junction.add_unique_key((self.foreign_key, self.other_key))
        return junction


class JunctionManager:
    """Creates or reuses the link entity of a many-to-many relationship."""

    def __init__(self, registry, foreign_keys=None):
        self.registry = registry
        self.foreign_keys = foreign_keys or ForeignKeyResolver()

    def _junction_for(self, spec):
        through = spec.through
        if isinstance(through, EntityType):
            if self.registry.get(through.name) is not through:
                raise UnknownEntityError(
                    f"Junction {through.name} is not defined in this registry",
                    source=spec.source.name, target=spec.target.name, alias=spec.alias,
                )
            return through, False
        existing = self.registry.get(through)
        if existing is not None:
            return existing, False
        junction = EntityType(
            through,
            meta_attrs={"underscored": spec.source.underscored},
            registry=self.registry,
            auto_primary_key=False,
        )
        junction.auto_created = True
        return junction, True

    @staticmethod
    def _declared_key(junction):
        return [name for name, col in junction.columns.items() if col.pk and not col.auto]

    @staticmethod
    def _key_pk(junction, name, composite):
        if composite:
            return True
        # keep whatever the caller declared on an existing column
        return None if name in junction.columns else False

    def plan(self, spec):
        source, target = spec.source.name, spec.target.name
        junction, created = self._junction_for(spec)
        if junction is spec.source or junction is spec.target:
            raise ConflictError(
                f"{junction.name} cannot be the junction of a relationship it takes part in",
                source=source, target=target, alias=spec.alias,
            )

        source_key, _ = self.foreign_keys.referenced_key(spec.source, spec.source_key, source, target, spec.alias)
        target_key, _ = self.foreign_keys.referenced_key(spec.target, spec.target_key, source, target, spec.alias)
        foreign_key = spec.foreign_key or key_name(spec.source.singular, source_key, junction.underscored)
        other_key = spec.other_key or key_name(spec.other_prefix or spec.target.singular, target_key, junction.underscored)
        if foreign_key == other_key:
            raise ConflictError(
                f"Junction {junction.name} would use '{foreign_key}' for both sides",
                source=source, target=target, alias=spec.alias,
            )

        expected = {foreign_key: source, other_key: target}
        if junction.junction_keys and junction.junction_keys != expected:
            current = ", ".join(f"{name}->{entity}" for name, entity in junction.junction_keys.items())
            wanted = ", ".join(f"{name}->{entity}" for name, entity in expected.items())
            raise ConflictError(
                f"Junction {junction.name} already links ({current}); this declaration needs ({wanted})",
                source=source, target=target, alias=spec.alias,
            )

        managed = (foreign_key, other_key)
        declared = self._declared_key(junction)
        # a key made of exactly the two link columns is the composite identity
        composite = not declared or set(declared) == set(managed)
        drop_columns = [name for name, col in junction.columns.items() if col.auto and col.pk] if composite else []
        keys = [
            self.foreign_keys.plan(
                junction,
                ForeignKeySpec(
                    foreign_key, spec.source, source_key, spec.on_delete, spec.on_update,
                    pk=self._key_pk(junction, foreign_key, composite), default_on_delete=CASCADE, alias=spec.alias,
                ),
                source=source, target=target,
            ),
            self.foreign_keys.plan(
                junction,
                ForeignKeySpec(
                    other_key, spec.target, target_key, spec.on_delete, spec.on_update,
                    pk=self._key_pk(junction, other_key, composite), default_on_delete=CASCADE, alias=spec.alias,
                ),
                source=source, target=target,
            ),
        ]
        return JunctionPlan(self.registry, junction, created, keys, composite, drop_columns)

    def resolve_junction(self, spec):
        return self.plan(spec).apply()

    def adopt_definition(self, junction, columns, meta=None):
        """Merge a caller's definition into a junction that was created implicitly.

        An explicit primary key in the definition wins: the managed keys stop
        being primary key columns and the composite unique key is dropped.
        """
        junction.check_open()
        meta = meta or {}
        check_meta(junction.name, meta)
        for name, col in columns.items():
            existing = junction.columns.get(name)
            if isinstance(existing, ForeignKey) and (col.pk or not existing.compatible_with(col)):
                raise ConflictError(
                    f"Attribute '{name}' of junction {junction.name} is a foreign key to "
                    f"{existing.target_entity}.{existing.target_column}",
                    source=junction.name,
                )

        explicit = any(col.pk for col in columns.values())
        for name, col in columns.items():
            if name not in junction.foreign_keys:
                junction.set_column(name, col)
        junction.configure(meta)
        if explicit:
            managed = tuple(junction.junction_keys)
            for name in managed:
                junction.set_column(name, junction.columns[name].with_pk(False))
            junction.drop_unique_key(managed)
        junction.auto_created = False
        logger.info(f"[JUNCTION]: {junction.name} defined explicitly, surrogate key={'yes' if explicit else 'no'}")
        return junction
