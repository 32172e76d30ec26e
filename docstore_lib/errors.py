"""Error types raised by the document store.

Read paths that legitimately find nothing return an absent `Result`
instead of raising; everything below is a real failure.
"""
from __future__ import annotations


class StoreError(Exception):
    """Base exception for document store operations.

    Attributes:
        message: Human-readable error message.
        path: Logical path associated with the operation (if applicable).
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} path={self.path}"
        return self.message


class ConfigurationError(StoreError, ValueError):
    """Raised for an invalid root scheme, path form or store option."""


class NotFoundError(StoreError, KeyError):
    """Raised when a write-side operation targets a path that does not exist."""

    def __init__(self, message: str = "Path not found", *, path: str | None = None) -> None:
        super().__init__(message, path=path)

    # KeyError quotes its argument in str(); keep the plain message instead.
    def __str__(self) -> str:
        return StoreError.__str__(self)


class DecodeError(StoreError, ValueError):
    """Raised when stored content cannot be decoded into the requested type."""

    def __init__(self, message: str, *, path: str | None = None, cause: Exception | None = None) -> None:
        super().__init__(message, path=path)
        self.cause = cause


class BackendError(StoreError):
    """Wraps a transport or API failure reported by the backend client."""

    def __init__(
        self,
        message: str = "Backend error",
        *,
        path: str | None = None,
        status: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.status = status
        self.cause = cause


class ContentNotReadyError(BackendError):
    """The resource exists but its content cannot be downloaded yet.

    Backends report this while a freshly written file is still being
    processed. The store treats it as an absent result.
    """

    def __init__(self, message: str = "Content not downloadable yet", **kwargs) -> None:
        super().__init__(message, **kwargs)
