from pydantic import BaseModel

from miniassoc.orm_types import ForeignKey


class ColumnOut(BaseModel):
    name: str
    dtype: str
    primary_key: bool
    nullable: bool
    unique: bool
    references: str | None = None
    on_delete: str | None = None
    on_update: str | None = None

    @classmethod
    def from_column(cls, name, col):
        data = {
            "name": name,
            "dtype": col.dtype.__name__,
            "primary_key": col.pk,
            "nullable": col.nullable,
            "unique": col.unique,
        }
        if isinstance(col, ForeignKey):
            data["references"] = f"{col.target_entity}.{col.target_column}"
            data["on_delete"] = col.on_delete
            data["on_update"] = col.on_update
        return cls(**data)


class EntityOut(BaseModel):
    name: str
    table_name: str
    underscored: bool
    junction: bool
    primary_keys: list[str]
    unique_keys: list[list[str]]
    columns: list[ColumnOut]

    @classmethod
    def from_entity(cls, entity):
        return cls(
            name=entity.name,
            table_name=entity.table_name,
            underscored=entity.underscored,
            junction=entity.is_junction,
            primary_keys=entity.primary_keys,
            unique_keys=[list(key) for key in entity.unique_keys],
            columns=[ColumnOut.from_column(name, col) for name, col in entity.columns.items()],
        )


class AccessorOut(BaseModel):
    name: str
    action: str
    plural: bool
    accepts_through_attributes: bool


class AssociationOut(BaseModel):
    kind: str
    source: str
    target: str
    as_name: str
    alias: str | None = None
    foreign_key: str
    foreign_key_owner: str
    target_key: str
    source_key: str | None = None
    other_key: str | None = None
    through: str | None = None
    on_update: str
    on_delete: str
    accessors: list[AccessorOut]

    @classmethod
    def from_association(cls, association):
        return cls(
            kind=association.kind.value,
            source=association.source.name,
            target=association.target.name,
            as_name=association.as_name,
            alias=association.alias,
            foreign_key=association.foreign_key,
            foreign_key_owner=association.foreign_key_owner.name,
            target_key=association.target_key,
            source_key=association.source_key,
            other_key=association.other_key,
            through=association.through.name if association.through is not None else None,
            on_update=association.on_update,
            on_delete=association.on_delete,
            accessors=[
                AccessorOut(
                    name=op.name,
                    action=op.action,
                    plural=op.plural,
                    accepts_through_attributes=op.accepts_through_attributes,
                )
                for op in association.accessors.values()
            ],
        )
