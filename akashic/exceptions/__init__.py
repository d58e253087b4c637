from .http import (
    AppError,
    AuthenticationRequired,
    DailyLimitReached,
    InsufficientBalance,
    InvalidKey,
    NotFound,
    PermissionDenied,
    ValidationError,
)

__all__ = [
    "AppError",
    "AuthenticationRequired",
    "DailyLimitReached",
    "InsufficientBalance",
    "InvalidKey",
    "NotFound",
    "PermissionDenied",
    "ValidationError",
]
