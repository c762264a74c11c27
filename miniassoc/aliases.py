import logging
from dataclasses import dataclass
from typing import Optional

from miniassoc.errors import AmbiguousSelfReferenceError, ConflictError
from miniassoc.naming import pluralize, singularize
from miniassoc.options import AliasName
from miniassoc.orm_types import AssociationKind

logger = logging.getLogger("MiniAssoc")


@dataclass(frozen=True)
class AssociationName:
    as_name: str
    singular: str
    plural: str
    alias: Optional[str] = None


class AliasResolver:
    """Gives every association its identity on the source entity.

    The identity is the alias when the caller supplied one, otherwise the
    target's singular name (belongsTo, hasOne) or plural name (hasMany,
    belongsToMany). Self references must be aliased: without one the foreign
    key and accessor names of a second self relationship would collide.
    """

    def resolve(self, source, target, kind, alias=None):
        kind = AssociationKind(kind)
        if source is target and alias is None:
            raise AmbiguousSelfReferenceError(
                f"{source.name}.{kind.value}({target.name}) refers to its own entity and needs an alias",
                source=source.name, target=target.name,
            )

        if isinstance(alias, AliasName):
            singular, plural = alias.singular, alias.plural
        elif alias is None:
            singular, plural = target.singular, target.plural
        elif kind.is_plural:
            singular, plural = singularize(alias), alias
        else:
            singular, plural = alias, pluralize(alias)

        as_name = plural if kind.is_plural else singular
        text = alias.singular if isinstance(alias, AliasName) else alias
        return AssociationName(as_name, singular, plural, text)

    def check_available(self, source, target, kind, name, options):
        """Return the existing association for an identical redeclaration, None when the name is free."""
        kind = AssociationKind(kind)
        existing = source.associations.get(name.as_name)
        if existing is not None:
            if (
                existing.kind is kind
                and existing.target is target
                and existing.options.signature() == options.signature()
            ):
                logger.debug(f"[ASSOCIATION]: {source.name}.{kind.value}({target.name}) as {name.as_name} already defined")
                return existing
            raise ConflictError(
                f"Alias '{name.as_name}' is already used by {source.name}.{existing.kind.value}({existing.target.name})",
                source=source.name, target=target.name, alias=name.alias,
            )

        if name.as_name in source.columns:
            raise ConflictError(
                f"Association name '{name.as_name}' collides with attribute {source.name}.{name.as_name}",
                source=source.name, target=target.name, alias=name.alias,
            )
        return None
