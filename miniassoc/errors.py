class AssociationError(ValueError):
    """Base class for failures raised while declaring associations.

    Carries the offending source, target and alias so the operator can tell
    which declaration broke the bootstrap.
    """

    def __init__(self, message, source=None, target=None, alias=None):
        self.message = message
        self.source = source
        self.target = target
        self.alias = alias
        super().__init__(self._format())

    def _format(self):
        context = [
            f"{label}={value}"
            for label, value in (("source", self.source), ("target", self.target), ("alias", self.alias))
            if value is not None
        ]
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ConflictError(AssociationError):
    pass


class MissingThroughError(AssociationError):
    pass


class AmbiguousSelfReferenceError(AssociationError):
    pass


class UnknownTargetKeyError(AssociationError):
    pass


class InvalidOptionsError(AssociationError):
    pass


class UnknownEntityError(AssociationError):
    pass


class FrozenRegistryError(RuntimeError):
    """Raised when the schema is mutated after the definition phase ended."""
