"""
Domain errors raised by the Service Layer.

Each error carries the HTTP status it maps to, so the API layer can translate it
with a single exception handler. Messages are meant for end users and must never
include secrets such as scroll keys.
"""

from typing import Any


class AppError(Exception):
    status_code: int = 400
    code: str = "error"

    def __init__(self, detail: str, **extra: Any):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.detail, "code": self.code, **self.extra}


class ValidationError(AppError):
    """Malformed or semantically invalid request data."""

    status_code = 400
    code = "validation_error"


class AuthenticationRequired(AppError):
    status_code = 401
    code = "authentication_required"

    def __init__(self, detail: str = "Authentication required", **extra: Any):
        super().__init__(detail, **extra)


class PermissionDenied(AppError):
    status_code = 403
    code = "permission_denied"


class InvalidKey(AppError):
    """Wrong unlock key. Non-fatal; the user may try again."""

    status_code = 403
    code = "invalid_key"

    def __init__(self, detail: str = "Incorrect key", **extra: Any):
        super().__init__(detail, **extra)


class DailyLimitReached(AppError):
    status_code = 403
    code = "daily_limit_reached"


class NotFound(AppError):
    status_code = 404
    code = "not_found"


class InsufficientBalance(AppError):
    status_code = 400
    code = "insufficient_balance"

    def __init__(self, required: int, balance: int, detail: str = "Insufficient mana balance"):
        super().__init__(detail, required=required, balance=balance)
        self.required = required
        self.balance = balance
