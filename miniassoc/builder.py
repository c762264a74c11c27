import logging
from dataclasses import replace

from pydantic import ValidationError

from miniassoc.accessors import generate
from miniassoc.aliases import AliasResolver
from miniassoc.association import Association
from miniassoc.errors import ConflictError, InvalidOptionsError, MissingThroughError
from miniassoc.foreign_keys import ForeignKeyResolver, ForeignKeySpec
from miniassoc.junction import JunctionManager, JunctionSpec
from miniassoc.naming import key_name
from miniassoc.options import AssociationOptions
from miniassoc.orm_types import AssociationKind

logger = logging.getLogger("MiniAssoc")

MANY_TO_MANY_ONLY = ("through", "other_key")


class AssociationBuilder:
    """Turns a relationship declaration into an `Association`.

    Everything is validated and planned before the first entity is touched, so
    a failing declaration leaves both entities as they were.
    """

    def __init__(self, registry):
        self.registry = registry
        self.foreign_keys = ForeignKeyResolver()
        self.junctions = JunctionManager(registry, self.foreign_keys)
        self.aliases = AliasResolver()

    def _validate_options(self, source, target, kind, options, kwargs):
        if isinstance(options, AssociationOptions):
            raw = {field: getattr(options, field) for field in options.model_fields_set}
        else:
            raw = self._alias_key(source, target, dict(options or {}))
        raw.update(self._alias_key(source, target, dict(kwargs)))
        try:
            return AssociationOptions.model_validate(raw)
        except ValidationError as exc:
            raise InvalidOptionsError(
                f"Invalid options for {source.name}.{kind.value}({target.name}): {exc}",
                source=source.name, target=target.name, alias=raw.get("alias"),
            ) from exc

    @staticmethod
    def _alias_key(source, target, values):
        """Store the `as` option under `alias`."""
        if "as" in values:
            if "alias" in values and values["alias"] != values["as"]:
                raise InvalidOptionsError(
                    f"Both as={values['as']!r} and alias={values['alias']!r} given",
                    source=source.name, target=target.name,
                )
            values["alias"] = values.pop("as")
        return values

    def _parse_options(self, source, target, kind, options, kwargs):
        if kwargs or not isinstance(options, AssociationOptions):
            options = self._validate_options(source, target, kind, options, kwargs)

        if kind is not AssociationKind.BELONGS_TO_MANY:
            misplaced = [name for name in MANY_TO_MANY_ONLY if getattr(options, name) is not None]
            if misplaced:
                raise InvalidOptionsError(
                    f"{', '.join(misplaced)} only apply to belongsToMany",
                    source=source.name, target=target.name, alias=options.alias_text,
                )
        if kind is AssociationKind.BELONGS_TO and options.source_key is not None:
            raise InvalidOptionsError(
                "source_key does not apply to belongsTo",
                source=source.name, target=target.name, alias=options.alias_text,
            )
        if (
            kind in (AssociationKind.HAS_ONE, AssociationKind.HAS_MANY)
            and options.source_key is not None
            and options.target_key is not None
            and options.source_key != options.target_key
        ):
            raise InvalidOptionsError(
                f"{kind.value} references a single key on {source.name}; got source_key and target_key",
                source=source.name, target=target.name, alias=options.alias_text,
            )
        return options

    def define(self, source, target, kind, options=None, **kwargs):
        self.registry.check_open()
        kind = AssociationKind(kind)
        source = self.registry.resolve(source)
        target = self.registry.resolve(target)
        options = self._parse_options(source, target, kind, options, kwargs)

        if kind is AssociationKind.BELONGS_TO_MANY and options.through is None:
            raise MissingThroughError(
                f"{source.name}.belongsToMany({target.name}) requires a through junction",
                source=source.name, target=target.name, alias=options.alias_text,
            )

        name = self.aliases.resolve(source, target, kind, options.alias)
        existing = self.aliases.check_available(source, target, kind, name, options)
        if existing is not None:
            return existing

        if kind is AssociationKind.BELONGS_TO_MANY:
            association, plan = self._plan_many_to_many(source, target, name, options)
        else:
            association, plan = self._plan_single(source, target, kind, name, options)

        accessors = generate(association)
        self._check_accessors(source, target, name, accessors)

        plan.apply()
        association = replace(association, accessors=accessors)
        source.add_association(association)
        self.registry.add_association(association)
        logger.info(
            f"[ASSOCIATION]: {source.name}.{kind.value}({target.name}) as {association.as_name} "
            f"fk={association.foreign_key_owner.name}.{association.foreign_key}"
            + (f" through={association.through.name}" if association.through is not None else "")
        )
        return association

    def _plan_single(self, source, target, kind, name, options):
        owner = self.foreign_keys.owner_for(kind, source, target)
        if kind is AssociationKind.BELONGS_TO:
            referenced, key = target, options.target_key
            prefix = name.singular
        else:
            referenced, key = source, options.source_key or options.target_key
            if kind is AssociationKind.HAS_ONE and name.alias is not None:
                prefix = name.singular
            else:
                prefix = source.singular

        key, _ = self.foreign_keys.referenced_key(referenced, key, source.name, target.name, name.alias)
        foreign_key = options.foreign_key or key_name(prefix, key, owner.underscored)
        plan = self.foreign_keys.plan(
            owner,
            ForeignKeySpec(foreign_key, referenced, key, options.on_delete, options.on_update, alias=name.alias),
            source=source.name, target=target.name,
        )
        association = Association(
            kind=kind,
            source=source,
            target=target,
            as_name=name.as_name,
            singular=name.singular,
            plural=name.plural,
            alias=name.alias,
            foreign_key=foreign_key,
            foreign_key_owner=owner,
            target_key=key,
            on_update=plan.column.on_update,
            on_delete=plan.column.on_delete,
            options=options,
        )
        return association, plan

    def _plan_many_to_many(self, source, target, name, options):
        plan = self.junctions.plan(JunctionSpec(
            source=source,
            target=target,
            through=options.through,
            foreign_key=options.foreign_key,
            other_key=options.other_key,
            source_key=options.source_key,
            target_key=options.target_key,
            on_delete=options.on_delete,
            on_update=options.on_update,
            other_prefix=name.singular if name.alias is not None else None,
            alias=name.alias,
        ))
        source_plan, other_plan = plan.keys
        association = Association(
            kind=AssociationKind.BELONGS_TO_MANY,
            source=source,
            target=target,
            as_name=name.as_name,
            singular=name.singular,
            plural=name.plural,
            alias=name.alias,
            foreign_key=source_plan.name,
            foreign_key_owner=plan.junction,
            target_key=other_plan.column.target_column,
            source_key=source_plan.column.target_column,
            other_key=other_plan.name,
            through=plan.junction,
            on_update=source_plan.column.on_update,
            on_delete=source_plan.column.on_delete,
            options=options,
        )
        return association, plan

    def _check_accessors(self, source, target, name, accessors):
        for other in source.associations.values():
            if other.accessors is None:
                continue
            clash = set(accessors) & set(other.accessors)
            if clash:
                raise ConflictError(
                    f"Accessor(s) {sorted(clash)} already generated for {source.name}.{other.as_name}",
                    source=source.name, target=target.name, alias=name.alias,
                )
