from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class AuditEntry:
    """Before/after snapshot of one mutation. Entries are never updated."""

    audit_id: int
    actor_id: int
    action: str
    entity: str
    entity_id: str
    before: Optional[Mapping[str, Any]]
    after: Optional[Mapping[str, Any]]
    created_at: Optional[datetime] = None
