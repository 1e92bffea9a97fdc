"""Utility functions for opsgraph."""

from opsgraph.utils.identifiers import (
    generate_audit_id,
    pair_id,
    utc_timestamp,
)

__all__ = [
    "generate_audit_id",
    "pair_id",
    "utc_timestamp",
]
