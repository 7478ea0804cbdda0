from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, load_json
from .model import AuditEntry
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(
        self,
        *,
        actor_id: int,
        action: str,
        entity: str,
        entity_id: str,
        before: Optional[Mapping[str, Any]],
        after: Optional[Mapping[str, Any]],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_log(actor_id, action, entity, entity_id, before_state, after_state)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (actor_id, action, entity, entity_id, dump_json(before), dump_json(after)),
            )
            return int(cur.lastrowid)

    def list_for_entity(self, entity: str, entity_id: str, *, limit: int) -> Sequence[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT audit_id, actor_id, action, entity, entity_id, before_state, after_state, created_at
                FROM audit_log
                WHERE entity=%s AND entity_id=%s
                ORDER BY created_at DESC, audit_id DESC
                LIMIT %s
                """,
                (entity, entity_id, int(limit)),
            )
            return [
                AuditEntry(
                    audit_id=int(r["audit_id"]),
                    actor_id=int(r["actor_id"]),
                    action=r["action"],
                    entity=r["entity"],
                    entity_id=r["entity_id"],
                    before=load_json(r.get("before_state")),
                    after=load_json(r.get("after_state")),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
