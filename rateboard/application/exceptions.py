"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PersistenceFailureError(ApplicationError):
    """Raised when the store could not durably apply a change. Nothing is broadcast."""


class PersistenceTimeoutError(PersistenceFailureError):
    """Raised when the persist step exceeds its configured timeout."""
