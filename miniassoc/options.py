from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from miniassoc.orm_types import REFERENTIAL_ACTIONS


class AliasName(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    singular: str
    plural: str


class AssociationOptions(BaseModel):
    """Recognized options of a relationship declaration.

    Keys are accepted in snake_case (`foreign_key`) or camelCase (`foreignKey`);
    the alias is accepted as `as` or `alias`.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
        arbitrary_types_allowed=True,
    )

    alias: Optional[Union[str, AliasName]] = Field(default=None, alias="as")
    foreign_key: Optional[str] = None
    target_key: Optional[str] = None
    source_key: Optional[str] = None
    other_key: Optional[str] = None
    through: Optional[Any] = None
    on_delete: Optional[str] = None
    on_update: Optional[str] = None

    @field_validator("alias", "foreign_key", "target_key", "source_key", "other_key")
    @classmethod
    def _not_blank(cls, value):
        if isinstance(value, str) and not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("on_delete", "on_update")
    @classmethod
    def _referential_action(cls, value):
        if value is None:
            return value
        action = " ".join(value.replace("_", " ").upper().split())
        if action not in REFERENTIAL_ACTIONS:
            raise ValueError(f"unknown referential action {value!r}, expected one of {', '.join(REFERENTIAL_ACTIONS)}")
        return action

    @field_validator("through")
    @classmethod
    def _through_reference(cls, value):
        from miniassoc.entity import EntityType

        if value is None or isinstance(value, EntityType):
            return value
        if hasattr(value, "_entity"):
            return value._entity
        if isinstance(value, str) and value.strip():
            return value
        raise ValueError("through must be an entity name or an entity type")

    @property
    def alias_text(self):
        if isinstance(self.alias, AliasName):
            return self.alias.singular
        return self.alias

    @property
    def through_name(self):
        if self.through is None or isinstance(self.through, str):
            return self.through
        return self.through.name

    def signature(self):
        """Comparable form: a junction given by entity or by name is the same declaration."""
        data = self.model_dump(exclude={"through"})
        data["through"] = self.through_name
        return data


class RegistryConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    underscored: bool = False
    primary_key_name: str = "id"
