"""SQLite storage for the gate audit log."""

import sqlite3
from pathlib import Path

from opsgraph.adapters.sinks import AuditSink
from opsgraph.errors import UpstreamUnavailable
from opsgraph.models.audit import AuditEntry
from server.catalog_db import CATALOG_DB_PATH


class SqliteAuditSink(AuditSink):
    """Audit sink that appends to an audit_log table next to the catalog."""

    def __init__(self, db_path: Path | str = CATALOG_DB_PATH) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                create table if not exists audit_log (
                    audit_id text primary key,
                    entity_type text not null,
                    entity_id text not null,
                    action text not null,
                    entry_json text not null,
                    created_at text not null
                )
                """
            )
            conn.execute(
                "create index if not exists idx_audit_log_entity_id on audit_log(entity_id)"
            )
            conn.commit()

    def append(self, entry: AuditEntry) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                insert into audit_log (audit_id, entity_type, entity_id, action, entry_json, created_at)
                values (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.audit_id,
                    entry.entity_type.value,
                    entry.entity_id,
                    entry.action.value,
                    entry.model_dump_json(),
                    entry.created_at,
                ),
            )
            conn.commit()

    def list_entries(self, entity_id: str | None = None, limit: int = 100) -> list[AuditEntry]:
        """Newest first, optionally for one entity."""
        sql = "select entry_json from audit_log"
        params: tuple = ()
        if entity_id is not None:
            sql += " where entity_id = ?"
            params = (entity_id,)
        sql += " order by created_at desc, rowid desc limit ?"
        try:
            with self._connect() as conn:
                rows = conn.execute(sql, params + (limit,)).fetchall()
        except sqlite3.Error as e:
            raise UpstreamUnavailable(f"audit log unavailable: {e}") from e
        return [AuditEntry.model_validate_json(row["entry_json"]) for row in rows]


_default_sink: SqliteAuditSink | None = None


def get_audit_sink() -> SqliteAuditSink:
    global _default_sink
    if _default_sink is None:
        _default_sink = SqliteAuditSink(CATALOG_DB_PATH)
    return _default_sink


def init_db() -> None:
    get_audit_sink().init_db()
