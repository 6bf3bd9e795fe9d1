"""Forkable exception classes."""


class ForkableError(Exception):
    """Base exception for forkable errors."""
    pass


class UnwrapError(ForkableError):
    """Called unwrap() on an Err result."""
    pass


class NotAFutureError(ForkableError, TypeError):
    """A chained function returned something other than a Future."""

    def __init__(self, value):
        super().__init__(
            f"chain() expected a function returning Future, got {type(value).__name__}"
        )
        self.value = value


class SettlementTimeout(ForkableError):
    """A forked computation did not settle within the allowed time."""
    pass


# ─── Collaborator Rejections ───


class CollaboratorError(ForkableError):
    """Base class for rejection values produced by I/O collaborators."""
    pass


class FileAccessError(CollaboratorError):
    """Reading a file or directory failed."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


class HTTPError(CollaboratorError):
    """Base class for HTTP collaborator failures."""
    pass


class HTTPStatusError(HTTPError):
    """Server answered with a non-success status code."""

    def __init__(self, url: str, status_code: int, reason: str = ""):
        message = f"{status_code} {reason}".strip()
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.reason = reason


class RequestFailedError(HTTPError):
    """The request never produced a response (connection, timeout, ...)."""

    def __init__(self, url: str, cause: BaseException):
        super().__init__(f"{url}: {cause}")
        self.url = url
        self.cause = cause
