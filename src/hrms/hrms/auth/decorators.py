from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Callable

from flask import request

from .guards import require_admin, require_elevated
from .middleware import Authenticator


@dataclass(frozen=True)
class AuthDecorators:
    login_required: Callable
    elevated_required: Callable
    admin_required: Callable


def auth_decorators(authenticator: Authenticator) -> AuthDecorators:
    """Build view decorators that pass the caller's Identity as the first argument."""

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            identity = authenticator.identify(request.headers.get("Authorization"))
            return view(identity, *args, **kwargs)

        return wrapper

    def elevated_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            identity = require_elevated(authenticator.identify(request.headers.get("Authorization")))
            return view(identity, *args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            identity = require_admin(authenticator.identify(request.headers.get("Authorization")))
            return view(identity, *args, **kwargs)

        return wrapper

    return AuthDecorators(
        login_required=login_required,
        elevated_required=elevated_required,
        admin_required=admin_required,
    )
