"""Role predicates evaluated against an authenticated Identity."""
from __future__ import annotations

from typing import Mapping

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import Identity


def _covering(table: Mapping[Role, bool]) -> Mapping[Role, bool]:
    missing = set(Role) - set(table)
    if missing:
        raise RuntimeError(f"Role table misses {sorted(r.value for r in missing)}")
    return table


_ELEVATED = _covering({Role.ADMIN: True, Role.HR: True, Role.EMPLOYEE: False})
_ADMIN = _covering({Role.ADMIN: True, Role.HR: False, Role.EMPLOYEE: False})


def is_elevated(role: Role) -> bool:
    return _ELEVATED[role]


def is_admin(role: Role) -> bool:
    return _ADMIN[role]


def require_elevated(identity: Identity) -> Identity:
    if not is_elevated(identity.role):
        raise AuthorizationError("Admin or HR access required")
    return identity


def require_admin(identity: Identity) -> Identity:
    if not is_admin(identity.role):
        raise AuthorizationError("Admin access required")
    return identity
