# backend/conference_central/errors.py
from __future__ import annotations

"""
Typed errors raised by the service layer.

Each error carries a stable, dot-separated ``code`` and the HTTP status the
API layer should answer with. conference_central.main registers a handler
that renders them as ``{"detail": message, "code": code}``.
"""

from typing import Any


class ConferenceCentralError(Exception):
    """Base error for the conference backend."""

    default_code = "internal.error"
    default_message = "Internal error"
    status_code = 500

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.meta = dict(meta or {})
        super().__init__(self.message)

    def to_public_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.meta:
            payload["meta"] = self.meta
        return payload


class UnauthorizedError(ConferenceCentralError):
    default_code = "auth.unauthorized"
    default_message = "Authorization required"
    status_code = 401


class InvalidArgumentError(ConferenceCentralError):
    default_code = "request.invalid_argument"
    default_message = "Invalid argument"
    status_code = 400


class NotFoundError(ConferenceCentralError):
    default_code = "resource.not_found"
    default_message = "Not found"
    status_code = 404


class UnsupportedQueryError(ConferenceCentralError):
    default_code = "query.unsupported"
    default_message = "Unsupported query"
    status_code = 400


class TransactionFailedError(ConferenceCentralError):
    default_code = "datastore.transaction_failed"
    default_message = "Transaction failed"
    status_code = 503
