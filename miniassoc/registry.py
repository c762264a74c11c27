import logging
from dataclasses import replace

from miniassoc.accessors import generate
from miniassoc.builder import AssociationBuilder
from miniassoc.entity import EntityType
from miniassoc.errors import ConflictError, FrozenRegistryError, UnknownEntityError
from miniassoc.options import RegistryConfig
from miniassoc.orm_types import AssociationKind, Column


class Registry:
    """Owns the entity types and associations of one schema bootstrap.

    Declarations are applied in call order. Once `freeze()` is called the
    registry and every entity in it are read-only.
    """

    logger = logging.getLogger("MiniAssoc")
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO)

    def __init__(self, config=None, **settings):
        if isinstance(config, RegistryConfig):
            self.config = config.model_copy(update=settings) if settings else config
        else:
            self.config = RegistryConfig.model_validate({**(config or {}), **settings})
        self._entities = {}
        self._associations = []
        self._frozen = False
        self.builder = AssociationBuilder(self)

    def __repr__(self):
        state = "frozen" if self._frozen else "open"
        return f"<Registry {state} entities=[{', '.join(self._entities)}] associations={len(self._associations)}>"

    def __contains__(self, name):
        return name in self._entities

    def __getitem__(self, name):
        try:
            return self._entities[name]
        except KeyError:
            raise UnknownEntityError(f"Entity {name} is not defined") from None

    def __iter__(self):
        return iter(self._entities.values())

    def __len__(self):
        return len(self._entities)

    def get(self, name, default=None):
        return self._entities.get(name, default)

    @property
    def entities(self):
        return dict(self._entities)

    @property
    def associations(self):
        return tuple(self._associations)

    @property
    def frozen(self):
        return self._frozen

    def check_open(self):
        if self._frozen:
            raise FrozenRegistryError("Registry is frozen; the definition phase is over")

    def resolve(self, entity):
        if isinstance(entity, EntityType):
            if self._entities.get(entity.name) is not entity:
                raise UnknownEntityError(f"Entity {entity.name} belongs to another registry")
            return entity
        if isinstance(entity, type) and hasattr(entity, "_entity"):
            return self.resolve(entity._entity)
        if isinstance(entity, str):
            return self[entity]
        raise TypeError(f"Expected an entity type or entity name, got {entity!r}")

    def define(self, name, columns=None, **meta):
        self.check_open()
        columns = dict(columns or {})
        existing = self._entities.get(name)
        if existing is not None:
            if not existing.auto_created:
                raise ConflictError(f"Entity {name} is already defined", source=name)
            junction = self.builder.junctions.adopt_definition(existing, columns, meta)
            self._refresh_accessors(junction)
            return junction

        entity = EntityType(name, columns, meta, registry=self)
        self.add_entity(entity)
        self.logger.debug(f"[ENTITY]: {entity}")
        return entity

    def entity(self, cls):
        """Class decorator: declare an entity from `Column` attributes and an inner `Meta`."""
        columns = {
            name: col
            for name, col in cls.__dict__.items()
            if isinstance(col, Column)
        }

        meta_cls = getattr(cls, "Meta", None)
        meta_attrs = {}
        if meta_cls:
            for attr in dir(meta_cls):
                if not attr.startswith('_'):
                    meta_attrs[attr] = getattr(meta_cls, attr)

        name = meta_attrs.pop("name", cls.__name__)
        cls._entity = self.define(name, columns, **meta_attrs)
        return cls

    def add_entity(self, entity):
        self.check_open()
        if entity.name in self._entities:
            raise ConflictError(f"Entity {entity.name} is already defined", source=entity.name)
        entity.registry = self
        self._entities[entity.name] = entity

    def add_association(self, association):
        self.check_open()
        self._associations.append(association)

    def _refresh_accessors(self, junction):
        for index, association in enumerate(self._associations):
            if association.through is not junction:
                continue
            refreshed = replace(association, accessors=generate(association))
            self._associations[index] = refreshed
            association.source.associations[association.as_name] = refreshed

    def associate(self, source, target, kind, options=None, **kwargs):
        return self.builder.define(source, target, kind, options, **kwargs)

    def belongs_to(self, source, target, options=None, **kwargs):
        return self.associate(source, target, AssociationKind.BELONGS_TO, options, **kwargs)

    def has_one(self, source, target, options=None, **kwargs):
        return self.associate(source, target, AssociationKind.HAS_ONE, options, **kwargs)

    def has_many(self, source, target, options=None, **kwargs):
        return self.associate(source, target, AssociationKind.HAS_MANY, options, **kwargs)

    def belongs_to_many(self, source, target, options=None, **kwargs):
        return self.associate(source, target, AssociationKind.BELONGS_TO_MANY, options, **kwargs)

    def associations_for(self, entity):
        entity = self.resolve(entity)
        return [
            a for a in self._associations
            if entity in (a.source, a.target, a.through)
        ]

    def get_association(self, source, name):
        return self.resolve(source).get_association(name)

    def freeze(self):
        if self._frozen:
            return self
        for entity in self._entities.values():
            entity.freeze()
        self._frozen = True
        self.logger.info(f"[REGISTRY]: frozen with {len(self._entities)} entities, {len(self._associations)} associations")
        return self
