"""
Error taxonomy for the assistant.
"""


class AssistantError(Exception):
    """Base class for all assistant errors."""


class ConfigurationError(AssistantError):
    """A required setting (e.g. an API key) is missing; the process must not start."""


class IndexBuildError(AssistantError):
    """The offline indexing run cannot proceed."""


class IndexLoadError(AssistantError):
    """The persisted index is missing, unreadable or empty."""


class ValidationError(AssistantError):
    """The request is malformed (e.g. no question text)."""


class BackendFailure(AssistantError):
    """An embedding or generation backend call failed."""

    def __init__(self, message: str, status: int = 500, error_type: str = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.error_type = error_type

    @classmethod
    def from_exception(cls, exc: Exception) -> "BackendFailure":
        """Wrap a client-library exception, keeping its HTTP-like status when it has one."""
        status = getattr(exc, "status", None)
        if not isinstance(status, int):
            status = getattr(exc, "code", None)
        if not isinstance(status, int) or isinstance(status, bool) or not 400 <= status <= 599:
            status = 500
        message = str(exc) or type(exc).__name__
        return cls(message, status=status, error_type=type(exc).__name__)
