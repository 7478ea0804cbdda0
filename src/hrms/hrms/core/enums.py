from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account roles used for authorization."""

    ADMIN = "admin"
    HR = "hr"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half_day"
    LEAVE = "leave"


class LeaveType(str, Enum):
    SICK = "sick"
    CASUAL = "casual"
    ANNUAL = "annual"
    MATERNITY = "maternity"
    PATERNITY = "paternity"


class LeaveStatus(str, Enum):
    """Leave approval workflow: pending -> approved | rejected."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DeliveryStatus(str, Enum):
    """Outbox state of a real-time notification event."""

    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"
