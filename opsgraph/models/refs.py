"""Entity kinds and lightweight references shared by every model."""

from enum import Enum

from pydantic import BaseModel

from opsgraph.errors import ValidationError


class EntityKind(str, Enum):
    """Closed set of catalog entity kinds."""

    domain = "domain"
    subdomain = "subdomain"
    mcp = "mcp"
    tool = "tool"
    agent = "agent"
    agent_category = "agent_category"
    workflow = "workflow"
    bridge = "bridge"

    @classmethod
    def parse(cls, value: "EntityKind | str") -> "EntityKind":
        """Resolve a caller-supplied entity type.

        Accepts the enum itself or its wire name in any case.
        Raises ValidationError for anything else.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise ValidationError(
                f"Invalid entity type: {value!r}. Must be one of: {valid}"
            ) from None


class EntityRef(BaseModel):
    """a pointer to one catalog entity, used in block evidence."""

    id: str
    type: EntityKind
    name: str
