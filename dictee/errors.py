"""Exceptions raised by the service layer and mapped to HTTP status codes."""

from __future__ import annotations


class DicteeError(Exception):
    status_code = 500


class ValidationError(DicteeError):
    """Bad input: missing field, zero-word text, unknown enum value, etc."""

    status_code = 400


class NotFoundError(DicteeError):
    status_code = 404


class QuotaExceededError(DicteeError):
    """Raised when a metered learner has used up today's graded attempts."""

    status_code = 429

    def __init__(self, message: str, quota=None):
        super().__init__(message)
        self.quota = quota
