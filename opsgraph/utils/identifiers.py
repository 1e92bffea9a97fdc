"""ID generation and timestamp utilities."""

import uuid
from datetime import datetime, timezone


def generate_audit_id() -> str:
    """Generate a unique audit entry ID (UUID4)."""
    return str(uuid.uuid4())


def pair_id(left: str, right: str) -> str:
    """Derive a stable ID for junction rows that have no ID of their own."""
    return f"{left}:{right}"


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
