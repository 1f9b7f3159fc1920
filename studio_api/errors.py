"""Error taxonomy shared by storage, services and the HTTP layer.

Every error carries the HTTP status it maps to and a machine-readable
``code``; the API renders them as ``{"error": message, "code": code}``.
"""


class StudioError(Exception):
    """Base class for all Code Studio errors."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "code": self.code}


class ValidationError(StudioError):
    """Malformed or missing input fields. Never retryable."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Invalid request data", errors: list | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(StudioError):
    """Referenced entity does not exist, or belongs to a different owner."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class StorageError(StudioError):
    """Backend connectivity or transaction failure."""

    status_code = 500
    code = "STORAGE_ERROR"

    def __init__(self, message: str = "Storage operation failed") -> None:
        super().__init__(message)


class UpstreamServiceError(StudioError):
    """The AI service is unavailable or returned an unusable response."""

    status_code = 503
    code = "AI_SERVICE_UNAVAILABLE"

    def __init__(self, message: str = "AI service unavailable") -> None:
        super().__init__(message)
