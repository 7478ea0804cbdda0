from __future__ import annotations

import math
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Type, TypeVar

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date, parse_iso_datetime

E = TypeVar("E", bound=Enum)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")

PASSWORD_RULE_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, "
    "one number, and one special character"
)


class RequestValidator:
    """Collects field-level errors for one request body.

    Each check returns the cleaned value (or None) and records a
    ``{"field", "message"}`` entry on failure; ``raise_if_invalid`` reports
    them all at once.
    """

    def __init__(self, data: Optional[Mapping[str, Any]]):
        self._data = data if isinstance(data, Mapping) else {}
        self.errors: list[dict] = []

    def _fail(self, field: str, message: str) -> None:
        self.errors.append({"field": field, "message": message})

    def _raw(self, field: str) -> Any:
        return self._data.get(field)

    def present(self, field: str) -> bool:
        return self._raw(field) is not None

    def required(self, field: str, message: str) -> Optional[str]:
        value = self._raw(field)
        if value is None or not str(value).strip():
            self._fail(field, message)
            return None
        return str(value).strip()

    def optional_str(self, field: str, message: str = "Must be a string") -> Optional[str]:
        value = self._raw(field)
        if value is None:
            return None
        if not isinstance(value, str):
            self._fail(field, message)
            return None
        return value

    def email(self, field: str, message: str = "Valid email is required") -> Optional[str]:
        value = self._raw(field)
        if not isinstance(value, str) or not _EMAIL_RE.match(value.strip()):
            self._fail(field, message)
            return None
        return value.strip().lower()

    def password(self, field: str, *, min_len: int = 8) -> Optional[str]:
        value = self._raw(field)
        if not isinstance(value, str) or len(value) < min_len:
            self._fail(field, f"Password must be at least {min_len} characters")
            return None
        if not _PASSWORD_RE.match(value):
            self._fail(field, PASSWORD_RULE_MESSAGE)
            return None
        return value

    def one_of(self, field: str, enum_cls: Type[E], message: str, *, optional: bool = False,
               allowed: Optional[Iterable[E]] = None) -> Optional[E]:
        value = self._raw(field)
        if value is None and optional:
            return None
        choices = set(allowed) if allowed is not None else set(enum_cls)
        try:
            member = enum_cls(value)
        except ValueError:
            self._fail(field, message)
            return None
        if member not in choices:
            self._fail(field, message)
            return None
        return member

    def number(self, field: str, message: str, *, optional: bool = False) -> Optional[float]:
        value = self._raw(field)
        if value is None and optional:
            return None
        if isinstance(value, bool):
            self._fail(field, message)
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            self._fail(field, message)
            return None
        # float() also accepts "nan" and "inf".
        if not math.isfinite(number):
            self._fail(field, message)
            return None
        return number

    def integer(self, field: str, message: str, *, min_value: Optional[int] = None,
                max_value: Optional[int] = None, optional: bool = False) -> Optional[int]:
        value = self._raw(field)
        if value is None and optional:
            return None
        if isinstance(value, bool):
            self._fail(field, message)
            return None
        try:
            number = int(str(value))
        except (TypeError, ValueError):
            self._fail(field, message)
            return None
        if (min_value is not None and number < min_value) or (max_value is not None and number > max_value):
            self._fail(field, message)
            return None
        return number

    def iso_date(self, field: str, message: str, *, optional: bool = False) -> Optional[date]:
        value = self._raw(field)
        if value is None and optional:
            return None
        try:
            return parse_iso_datetime(str(value)).date() if "T" in str(value) else parse_iso_date(str(value))
        except (TypeError, ValueError):
            self._fail(field, message)
            return None

    def iso_datetime(self, field: str, message: str) -> Optional[datetime]:
        value = self._raw(field)
        try:
            return parse_iso_datetime(str(value))
        except (TypeError, ValueError):
            self._fail(field, message)
            return None

    def raise_if_invalid(self) -> None:
        if self.errors:
            raise ValidationError("Validation failed", errors=self.errors)
