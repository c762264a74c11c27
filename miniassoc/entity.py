from types import MappingProxyType

from miniassoc.errors import FrozenRegistryError
from miniassoc.naming import pluralize, singularize, underscore
from miniassoc.orm_types import AssociationKind, Column, ForeignKey, Number

META_KEYS = {"name", "table_name", "underscored", "singular", "plural"}


def check_meta(name, meta):
    unknown = set(meta) - META_KEYS
    if unknown:
        raise ValueError(f"Unknown entity option(s) for {name}: {', '.join(sorted(unknown))}")


class EntityType:
    def __init__(self, name, columns=None, meta_attrs=None, registry=None, auto_primary_key=True):
        self.meta = meta_attrs or {}
        check_meta(name, self.meta)

        self.name = name
        self.registry = registry
        self.underscored = self.meta.get("underscored", registry.config.underscored if registry is not None else False)
        self.singular = None
        self.plural = None
        self.table_name = None
        self.unique_keys = []
        self.associations = {}
        self.is_junction = False
        self.auto_created = False
        # name -> referenced entity name, for the two keys a junction manages
        self.junction_keys = {}
        self._columns = {}
        self._frozen = False

        self._resolve_names()
        self._resolve_table_name()
        self._resolve_columns(columns or {})
        self._resolve_pk(auto_primary_key)

    def __repr__(self):
        cols = ", ".join(self._columns.keys())
        pk = self.pk if self.pk else self.primary_keys or "None"
        return f"<EntityType {self.name} table={self.table_name} columns=[{cols}] pk={pk}>"

    def _resolve_names(self):
        self.singular = self.meta.get("singular") or singularize(self.name)
        self.plural = self.meta.get("plural") or pluralize(self.singular)

    def _resolve_table_name(self):
        table_name = self.meta.get("table_name")
        if not table_name:
            table_name = underscore(self.plural) if self.underscored else self.plural
        self.table_name = table_name

    def _resolve_columns(self, columns):
        for name, col in columns.items():
            if not isinstance(col, Column):
                raise TypeError(f"Attribute {self.name}.{name} must be a Column, got {type(col).__name__}")
            self._columns[name] = col

    def _resolve_pk(self, auto_primary_key):
        if self.primary_keys or not auto_primary_key:
            return
        pk_name = self.registry.config.primary_key_name if self.registry is not None else "id"
        if pk_name in self._columns:
            raise ValueError(f"Entity {self.name} declares '{pk_name}' without marking it as primary key")
        column = Number(pk=True, nullable=False)
        column.auto = True
        self._columns = {pk_name: column, **self._columns}

    @property
    def columns(self):
        return MappingProxyType(self._columns)

    @property
    def primary_keys(self):
        return [name for name, col in self._columns.items() if col.pk]

    @property
    def pk(self):
        keys = self.primary_keys
        return keys[0] if len(keys) == 1 else None

    @property
    def has_surrogate_key(self):
        """A primary key that is not made of foreign keys."""
        return any(col.pk and not isinstance(col, ForeignKey) for col in self._columns.values())

    @property
    def foreign_keys(self):
        return {name: col for name, col in self._columns.items() if isinstance(col, ForeignKey)}

    @property
    def frozen(self):
        return self._frozen

    def __contains__(self, name):
        return name in self._columns

    def freeze(self):
        self._frozen = True

    def check_open(self):
        if self._frozen:
            raise FrozenRegistryError(f"Entity {self.name} is frozen; the definition phase is over")

    def configure(self, meta):
        """Apply entity options given after creation. Existing column names are kept."""
        self.check_open()
        check_meta(self.name, meta)
        self.meta = {**self.meta, **meta}
        if "underscored" in meta:
            self.underscored = meta["underscored"]
        self._resolve_names()
        self._resolve_table_name()

    def set_column(self, name, column):
        self.check_open()
        self._columns[name] = column

    def drop_column(self, name):
        self.check_open()
        self._columns.pop(name, None)

    def add_unique_key(self, names):
        self.check_open()
        names = tuple(names)
        if names not in self.unique_keys:
            self.unique_keys.append(names)

    def drop_unique_key(self, names):
        self.check_open()
        names = tuple(names)
        if names in self.unique_keys:
            self.unique_keys.remove(names)

    def add_association(self, association):
        self.check_open()
        self.associations[association.as_name] = association

    def get_association(self, name):
        return self.associations.get(name)

    def _registry(self):
        if self.registry is None:
            raise RuntimeError(f"Entity {self.name} is not bound to a registry")
        return self.registry

    def belongs_to(self, target, options=None, **kwargs):
        return self._registry().associate(self, target, AssociationKind.BELONGS_TO, options, **kwargs)

    def has_one(self, target, options=None, **kwargs):
        return self._registry().associate(self, target, AssociationKind.HAS_ONE, options, **kwargs)

    def has_many(self, target, options=None, **kwargs):
        return self._registry().associate(self, target, AssociationKind.HAS_MANY, options, **kwargs)

    def belongs_to_many(self, target, options=None, **kwargs):
        return self._registry().associate(self, target, AssociationKind.BELONGS_TO_MANY, options, **kwargs)
