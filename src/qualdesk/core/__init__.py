"""Core utilities and shared functionality."""

from qualdesk.core.timezone import (
    now_local,
    to_local,
    LOCAL_TZ,
)
from qualdesk.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    PermissionDeniedError,
    UnavailableError,
    FetchError,
    MutationError,
)

__all__ = [
    "now_local",
    "to_local",
    "LOCAL_TZ",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "UnavailableError",
    "FetchError",
    "MutationError",
]
