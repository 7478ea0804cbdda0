from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Any

from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import ACCESS_TOKEN_MINUTES, REFRESH_TOKEN_DAYS
from ..core.exceptions import InvalidTokenError, TokenExpiredError

ACCESS = "access"
REFRESH = "refresh"


class TokenService:
    """Issues and verifies signed, timestamped bearer tokens.

    Access and refresh tokens use different secrets and salts, so one class of
    token never verifies as the other. The service keeps no state; revocation
    happens by clearing the refresh hash stored on the account.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        *,
        access_ttl: timedelta = timedelta(minutes=ACCESS_TOKEN_MINUTES),
        refresh_ttl: timedelta = timedelta(days=REFRESH_TOKEN_DAYS),
    ):
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens need distinct secrets")
        self._serializers = {
            ACCESS: URLSafeTimedSerializer(access_secret, salt="hrms.access-token"),
            REFRESH: URLSafeTimedSerializer(refresh_secret, salt="hrms.refresh-token"),
        }
        self._max_age = {
            ACCESS: int(access_ttl.total_seconds()),
            REFRESH: int(refresh_ttl.total_seconds()),
        }

    def issue_access_token(self, *, account_id: int, role: str, email: str, employee_id: str) -> str:
        claims = {
            "account_id": account_id,
            "role": role,
            "email": email,
            "employee_id": employee_id,
            "typ": ACCESS,
        }
        return self._serializers[ACCESS].dumps(claims)

    def issue_refresh_token(self, *, account_id: int) -> str:
        # jti keeps two refresh tokens issued in the same second distinct.
        return self._serializers[REFRESH].dumps(
            {"account_id": account_id, "typ": REFRESH, "jti": secrets.token_hex(8)}
        )

    def verify(self, token: str, *, is_refresh: bool = False) -> dict[str, Any]:
        kind = REFRESH if is_refresh else ACCESS
        try:
            claims = self._serializers[kind].loads(token, max_age=self._max_age[kind])
        except SignatureExpired as exc:
            raise TokenExpiredError() from exc
        except BadData as exc:
            raise InvalidTokenError() from exc

        if not isinstance(claims, dict) or claims.get("typ") != kind or "account_id" not in claims:
            raise InvalidTokenError()
        return claims
