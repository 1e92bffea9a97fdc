"""Exception taxonomy for dependency analysis.

Hard blocks are not exceptions: they come back as a normal CheckResult
that the caller branches on.
"""


class OpsGraphError(Exception):
    """Base class for all opsgraph errors."""
    pass


class EntityNotFound(OpsGraphError):
    """The target of a check or analysis does not exist in the entity store."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        # enum kinds carry their wire name in .value
        self.entity_type = getattr(entity_type, "value", entity_type)
        self.entity_id = entity_id
        super().__init__(f"Entity not found: {self.entity_type} {entity_id}")


class ValidationError(OpsGraphError, ValueError):
    """Malformed caller input, e.g. an unknown entity type or a short reason."""
    pass


class UpstreamUnavailable(OpsGraphError):
    """The entity store could not be reached, so no decision can be made."""
    pass
