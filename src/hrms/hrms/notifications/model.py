from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.serializers import to_json
from ..core.enums import DeliveryStatus

LEAVE_REQUEST = "leave_request"
LEAVE_UPDATE = "leave_update"


@dataclass(frozen=True)
class Notification:
    notification_id: int
    account_id: int
    type: str
    title: str
    message: str
    metadata: Mapping[str, Any] = field(default_factory=dict)
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def to_dict(self) -> dict:
        data = to_json(self)
        data["is_read"] = self.is_read
        return data


@dataclass(frozen=True)
class OutboxEvent:
    """Real-time delivery state of one notification."""

    notification_id: int
    account_id: int
    status: DeliveryStatus
    attempts: int = 0
    last_error: Optional[str] = None
    updated_at: Optional[datetime] = None
