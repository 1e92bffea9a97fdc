"""Entity store protocol and implementations."""

from opsgraph.store.base import EntityStore, merge_changes, require_entity
from opsgraph.store.memory import InMemoryEntityStore

__all__ = ["EntityStore", "InMemoryEntityStore", "merge_changes", "require_entity"]
