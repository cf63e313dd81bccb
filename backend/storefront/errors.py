# Overview: Domain error taxonomy shared by services and routes.

from __future__ import annotations

from flask import jsonify


class PosError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(PosError):
    """Referenced product, sale, user or category does not exist."""
    status_code = 404


class InvalidArgumentError(PosError, ValueError):
    """Malformed or self-contradictory request."""
    status_code = 400


class InvalidStateError(PosError):
    """Operation not allowed in the record's current state."""
    status_code = 400


class InsufficientStockError(PosError):
    """Requested quantity exceeds available stock."""
    status_code = 400


class ConflictError(PosError):
    """Uniqueness violation (duplicate SKU, e-mail, category name)."""
    status_code = 409


def error_response(exc: PosError):
    body = {"message": exc.message}
    if exc.details:
        body["details"] = exc.details
    return jsonify(body), exc.status_code
