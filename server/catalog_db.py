"""SQLite storage for catalog entities and relations."""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Any

from opsgraph.errors import UpstreamUnavailable, ValidationError
from opsgraph.models.check_result import Action
from opsgraph.models.entities import (
    CHILD_LINKS,
    ENTITY_MODELS,
    RELATION_MODELS,
    CatalogRecord,
    CrossDomainBridge,
    RelationKind,
    RelationRecord,
)
from opsgraph.models.refs import EntityKind
from opsgraph.store.base import (
    collect_delete_plan,
    merge_changes,
    require_entity,
    touching_relations,
)
from opsgraph.utils.identifiers import utc_timestamp

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "catalog.sqlite"
CATALOG_DB_PATH = Path(os.getenv("CATALOG_DB_PATH", str(DEFAULT_DB_PATH)))


class SqliteEntityStore:
    """EntityStore over one sqlite file.

    Records are stored whole as JSON; foreign keys are read back with
    json_extract. Any sqlite failure surfaces as UpstreamUnavailable.
    """

    def __init__(self, db_path: Path | str = CATALOG_DB_PATH) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _fetch(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        try:
            with self._connect() as conn:
                return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise UpstreamUnavailable(f"catalog store unavailable: {e}") from e

    def _write(self, statements: list[tuple[str, tuple]]) -> None:
        """Run statements in one transaction."""
        try:
            with self._connect() as conn:
                for sql, params in statements:
                    conn.execute(sql, params)
                conn.commit()
        except sqlite3.Error as e:
            raise UpstreamUnavailable(f"catalog store unavailable: {e}") from e

    def init_db(self) -> None:
        self._write([
            (
                """
                create table if not exists entities (
                    kind text not null,
                    entity_id text not null,
                    name text not null,
                    entity_json text not null,
                    updated_at text not null,
                    primary key (kind, entity_id)
                )
                """,
                (),
            ),
            (
                """
                create table if not exists relations (
                    kind text not null,
                    relation_id text not null,
                    source_id text not null,
                    target_id text not null,
                    relation_json text not null,
                    updated_at text not null,
                    primary key (kind, relation_id)
                )
                """,
                (),
            ),
            ("create index if not exists idx_relations_source on relations(kind, source_id)", ()),
            ("create index if not exists idx_relations_target on relations(kind, target_id)", ()),
        ])

    # -- writes --

    def _entity_upsert(self, record: CatalogRecord) -> tuple[str, tuple]:
        return (
            """
            insert into entities (kind, entity_id, name, entity_json, updated_at)
            values (?, ?, ?, ?, ?)
            on conflict(kind, entity_id) do update set
                name = excluded.name,
                entity_json = excluded.entity_json,
                updated_at = excluded.updated_at
            """,
            (record.kind.value, record.id, record.name, record.model_dump_json(), utc_timestamp()),
        )

    def _relation_upsert(self, record: RelationRecord) -> tuple[str, tuple]:
        return (
            """
            insert into relations (kind, relation_id, source_id, target_id, relation_json, updated_at)
            values (?, ?, ?, ?, ?, ?)
            on conflict(kind, relation_id) do update set
                source_id = excluded.source_id,
                target_id = excluded.target_id,
                relation_json = excluded.relation_json,
                updated_at = excluded.updated_at
            """,
            (
                record.relation_kind.value,
                record.id,
                record.source_id,
                record.target_id,
                record.model_dump_json(),
                utc_timestamp(),
            ),
        )

    def put_entity(self, record: CatalogRecord) -> CatalogRecord:
        """insert or update an entity."""
        if isinstance(record, CrossDomainBridge):
            self._write([self._relation_upsert(record)])
        else:
            self._write([self._entity_upsert(record)])
        return record

    def put_relation(self, record: RelationRecord) -> RelationRecord:
        self._write([self._relation_upsert(record)])
        return record

    # -- EntityStore --

    def get_entity(self, kind: EntityKind, entity_id: str) -> CatalogRecord | None:
        if kind == EntityKind.bridge:
            rows = self._fetch(
                "select relation_json from relations where kind = ? and relation_id = ?",
                (RelationKind.bridge.value, entity_id),
            )
            return CrossDomainBridge.model_validate_json(rows[0]["relation_json"]) if rows else None
        rows = self._fetch(
            "select entity_json from entities where kind = ? and entity_id = ?",
            (kind.value, entity_id),
        )
        if not rows:
            return None
        return ENTITY_MODELS[kind].model_validate_json(rows[0]["entity_json"])

    def list_entities(self, kind: EntityKind) -> list[CatalogRecord]:
        if kind == EntityKind.bridge:
            return list(self.list_relations(RelationKind.bridge))
        rows = self._fetch(
            "select entity_json from entities where kind = ? order by rowid", (kind.value,)
        )
        model = ENTITY_MODELS[kind]
        return [model.model_validate_json(row["entity_json"]) for row in rows]

    def list_relations(
        self,
        kind: RelationKind,
        *,
        source_id: str | None = None,
        target_id: str | None = None,
    ) -> list[RelationRecord]:
        sql = "select relation_json from relations where kind = ?"
        params: list[Any] = [kind.value]
        if source_id is not None:
            sql += " and source_id = ?"
            params.append(source_id)
        if target_id is not None:
            sql += " and target_id = ?"
            params.append(target_id)
        rows = self._fetch(sql + " order by rowid", tuple(params))
        model = RELATION_MODELS[kind]
        return [model.model_validate_json(row["relation_json"]) for row in rows]

    def list_children(self, parent_kind: EntityKind, parent_id: str) -> list[CatalogRecord]:
        children = []
        for child_kind, field_name in CHILD_LINKS.get(parent_kind, []):
            rows = self._fetch(
                "select entity_json from entities "
                "where kind = ? and json_extract(entity_json, ?) = ? order by rowid",
                (child_kind.value, f"$.{field_name}", parent_id),
            )
            model = ENTITY_MODELS[child_kind]
            children.extend(model.model_validate_json(row["entity_json"]) for row in rows)
        return children

    def apply_action(
        self,
        kind: EntityKind,
        entity_id: str,
        action: Action,
        changes: dict[str, Any] | None = None,
    ) -> None:
        """Commit a mutation in a single transaction."""
        record = require_entity(self, kind, entity_id)

        if action == Action.delete:
            doomed, detach = collect_delete_plan(self, kind, entity_id)
            statements = [
                self._entity_upsert(child.model_copy(update={field_name: None}))
                for child, field_name in detach
            ]
            for doomed_kind, doomed_id in doomed:
                for row in touching_relations(self, doomed_kind, doomed_id):
                    statements.append((
                        "delete from relations where kind = ? and relation_id = ?",
                        (row.relation_kind.value, row.id),
                    ))
                if doomed_kind == EntityKind.bridge:
                    statements.append((
                        "delete from relations where kind = ? and relation_id = ?",
                        (RelationKind.bridge.value, doomed_id),
                    ))
                else:
                    statements.append((
                        "delete from entities where kind = ? and entity_id = ?",
                        (doomed_kind.value, doomed_id),
                    ))
            self._write(statements)
            logger.info("deleted %s %s (%d records)", kind.value, entity_id, len(doomed))
            return

        if action == Action.status_change and not (changes or {}).get("status"):
            raise ValidationError("status_change requires a 'status' in changes")
        self.put_entity(merge_changes(record, changes))
        logger.info("applied %s to %s %s", action.value, kind.value, entity_id)


_default_store: SqliteEntityStore | None = None


def get_store() -> SqliteEntityStore:
    """Store bound to CATALOG_DB_PATH."""
    global _default_store
    if _default_store is None:
        _default_store = SqliteEntityStore(CATALOG_DB_PATH)
    return _default_store


def init_db() -> None:
    get_store().init_db()
