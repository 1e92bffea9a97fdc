"""database initialization helpers."""

from server.audit_db import init_db as init_audit_db
from server.catalog_db import init_db as init_catalog_db


def init_all() -> None:
    """initialize all sqlite tables."""
    init_catalog_db()
    init_audit_db()
