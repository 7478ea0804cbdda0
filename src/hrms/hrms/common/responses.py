"""JSON envelope shared by every route: ``{success, message?, <resource>...}``."""
from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException, NotFound

from ..core.exceptions import DomainError, ValidationError
from .serializers import to_json

logger = logging.getLogger(__name__)


def ok(message: Optional[str] = None, *, status_code: int = 200, **payload: Any):
    body: dict = {"success": True}
    if message:
        body["message"] = message
    body.update(to_json(payload))
    return jsonify(body), status_code


def fail(message: str, status: int, *, errors: Optional[list] = None):
    body: dict = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(exc: ValidationError):
        return fail(str(exc), exc.status_code, errors=exc.errors)

    @app.errorhandler(DomainError)
    def _domain(exc: DomainError):
        return fail(str(exc), exc.status_code)

    @app.errorhandler(NotFound)
    def _not_found(exc: NotFound):
        return fail("Route not found", 404)

    @app.errorhandler(HTTPException)
    def _http(exc: HTTPException):
        return fail(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail("Internal server error", 500)
