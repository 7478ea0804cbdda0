from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import InvalidTokenError, MissingTokenError
from .model import Identity
from .repository import AccountRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class Authenticator:
    """Resolves a bearer header into an Identity.

    Missing header -> MissingTokenError, expired -> TokenExpiredError, any
    other failure (bad signature, unknown or deleted account) -> InvalidTokenError.
    """

    def __init__(self, tokens: TokenService, accounts: AccountRepository):
        self._tokens = tokens
        self._accounts = accounts

    def identify(self, authorization: Optional[str]) -> Identity:
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            raise MissingTokenError()
        return self.identify_token(authorization[len(BEARER_PREFIX):].strip())

    def identify_token(self, token: Optional[str]) -> Identity:
        if not token:
            raise MissingTokenError()

        claims = self._tokens.verify(token)
        try:
            account_id = int(claims["account_id"])
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError() from exc

        account = self._accounts.get_by_id(account_id)
        if not account:
            logger.info("Token presented for unknown account %s", account_id)
            raise InvalidTokenError()
        return Identity.from_account(account)
