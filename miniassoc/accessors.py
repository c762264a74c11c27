"""Accessor contracts generated for each association.

Nothing here reads or writes records. An `AccessorSet` is a read-only table of
operation descriptors; the runtime that owns storage dispatches through it,
e.g. `accessors.dispatch(runtime, "addProject", user, project, through={"role": "lead"})`
ends up as `runtime.add(operation, user, project, through={"role": "lead"})`.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Tuple

from miniassoc.naming import accessor_name

SINGULAR_ACTIONS = (
    ("get", False),
    ("set", False),
    ("create", False),
)

PLURAL_ACTIONS = (
    ("get", True),
    ("set", True),
    ("add", False),
    ("add", True),
    ("create", False),
    ("remove", False),
    ("remove", True),
    ("has", False),
    ("has", True),
    ("count", True),
)

THROUGH_ACTIONS = ("add", "set", "create")


@dataclass(frozen=True)
class AccessorOperation:
    name: str
    action: str
    plural: bool
    association: str
    source: str
    target: str
    foreign_key: str
    target_key: str
    other_key: Optional[str] = None
    through: Optional[str] = None
    through_attributes: Tuple[str, ...] = ()

    @property
    def accepts_through_attributes(self):
        return self.through is not None and self.action in THROUGH_ACTIONS

    def validate_through(self, payload):
        """Check a per-call junction payload and return it as a plain dict."""
        if not self.accepts_through_attributes:
            raise ValueError(f"{self.name} does not accept junction attributes")
        payload = dict(payload)
        managed = {self.foreign_key, self.other_key} & set(payload)
        if managed:
            raise ValueError(f"{self.name} cannot set junction keys {sorted(managed)} directly")
        unknown = set(payload) - set(self.through_attributes)
        if unknown:
            raise ValueError(f"{self.through} has no attribute(s) {sorted(unknown)}")
        return payload


class AccessorSet(Mapping):
    def __init__(self, association, operations):
        self.association = association
        self._operations = MappingProxyType(dict(operations))

    def __getitem__(self, name):
        return self._operations[name]

    def __iter__(self):
        return iter(self._operations)

    def __len__(self):
        return len(self._operations)

    def __repr__(self):
        return f"<AccessorSet {self.association} [{', '.join(self._operations)}]>"

    def names(self):
        return list(self._operations)

    def dispatch(self, runtime, name, instance, *args, through=None, **kwargs):
        operation = self[name]
        if through is not None:
            kwargs["through"] = operation.validate_through(through)
        handler = getattr(runtime, operation.action)
        return handler(operation, instance, *args, **kwargs)


def _through_attributes(association):
    junction = association.through
    if junction is None:
        return ()
    managed = {association.foreign_key, association.other_key}
    return tuple(
        name for name, col in junction.columns.items()
        if name not in managed and not col.pk
    )


def generate(association):
    actions = PLURAL_ACTIONS if association.kind.is_plural else SINGULAR_ACTIONS
    through = association.through.name if association.through is not None else None
    through_attributes = _through_attributes(association)

    operations = {}
    for action, plural in actions:
        name = accessor_name(action, association.plural if plural else association.singular)
        operations[name] = AccessorOperation(
            name=name,
            action=action,
            plural=plural,
            association=association.as_name,
            source=association.source.name,
            target=association.target.name,
            foreign_key=association.foreign_key,
            target_key=association.target_key,
            other_key=association.other_key,
            through=through,
            through_attributes=through_attributes,
        )
    return AccessorSet(association.as_name, operations)
