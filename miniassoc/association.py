from dataclasses import dataclass, field
from typing import Any, Optional

from miniassoc.orm_types import AssociationKind


@dataclass(frozen=True)
class Association:
    """Resolved metadata of one declared relationship.

    `target_key` is the attribute the foreign key points at: the target's key
    for belongsTo and belongsToMany, the source's key for hasOne and hasMany.
    For belongsToMany, `foreign_key` lives on the junction and references the
    source, `other_key` lives on the junction and references the target.
    """

    kind: AssociationKind
    source: Any
    target: Any
    as_name: str
    singular: str
    plural: str
    foreign_key: str
    foreign_key_owner: Any
    target_key: str
    on_update: str
    on_delete: str
    alias: Optional[str] = None
    source_key: Optional[str] = None
    other_key: Optional[str] = None
    through: Any = None
    options: Any = field(default=None, compare=False, repr=False)
    accessors: Any = field(default=None, compare=False, repr=False)

    def __repr__(self):
        through = f" through={self.through.name}" if self.through is not None else ""
        return (
            f"<Association {self.source.name}.{self.kind.value}({self.target.name}) as={self.as_name} "
            f"fk={self.foreign_key_owner.name}.{self.foreign_key}{through}>"
        )

    @property
    def identity(self):
        return (self.source.name, self.target.name, self.as_name)

    @property
    def is_plural(self):
        return self.kind.is_plural

    @property
    def is_self_referential(self):
        return self.source is self.target
