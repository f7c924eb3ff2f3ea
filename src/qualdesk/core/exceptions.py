"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when a request cannot be honoured as given."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class PermissionDeniedError(AppError):
    """Raised by a data source when the operator may not touch a record."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"Permission denied on {resource}: {identifier}",
            code="PERMISSION_DENIED",
        )


class UnavailableError(AppError):
    """Raised when the remote store cannot be reached."""

    def __init__(self, message: str = "Remote store unavailable"):
        super().__init__(message, code="UNAVAILABLE")


class FetchError(AppError):
    """Read failure surfaced on a fetch subscription. Never cached."""

    def __init__(self, key: str, cause: BaseException):
        self.key = key
        self.cause = cause
        super().__init__(f"Failed to fetch '{key}': {cause}", code="FETCH_ERROR")


class MutationError(AppError):
    """Failure inside a bulk delete run."""

    def __init__(self, message: str = "Failed to delete qualification(s)"):
        super().__init__(message, code="MUTATION_ERROR")
