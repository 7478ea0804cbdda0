from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import AuditEntry


class AuditRepository(Protocol):
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
        raise NotImplementedError

    def list_for_entity(self, entity: str, entity_id: str, *, limit: int) -> Sequence[AuditEntry]:
        raise NotImplementedError
