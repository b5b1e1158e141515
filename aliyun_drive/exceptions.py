"""
Aliyun Drive exception hierarchy.

All exceptions inherit from AliyunDriveError for easy catching.
"""

from typing import Any, TypeVar

E = TypeVar("E", bound="AliyunDriveError")


class AliyunDriveError(Exception):
    """Base exception for all aliyun_drive errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class AuthenticationError(AliyunDriveError):
    """Authentication failed."""


class TokenRefreshError(AuthenticationError):
    """Exchanging the refresh token for an access token failed."""


class APIError(AliyunDriveError):
    """API request failed."""

    def __init__(self, message: str, *, code: int, url: str | None = None) -> None:
        super().__init__(message, code=code, url=url)
        self.code = code
        self.url = url


class NotFoundError(APIError):
    """Resource not found (file, folder, path)."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message, code=404, url=url)


class RequestFailedError(APIError):
    """Request answered with a non-404 error status."""


class ProtocolError(AliyunDriveError):
    """Response body could not be parsed or lacks required fields."""

    def __init__(self, message: str, *, body: str | None = None) -> None:
        super().__init__(message, body=body)
        self.body = body


class ValidationError(AliyunDriveError):
    """Operation rejected before any request was issued."""


class RootNodeError(ValidationError):
    """Mutating operation attempted on the root folder."""

    def __init__(self, message: str = "can't operate on root") -> None:
        super().__init__(message)


class UnsupportedFormatError(ValidationError):
    """File format cannot be uploaded directly."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message, path=path)
        self.path = path


class NetworkError(AliyunDriveError):
    """Network-level error (connection failed, timeout)."""


class PathError(AliyunDriveError):
    """Path-related error."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message, path=path)
        self.path = path


class PathNotFoundError(PathError, NotFoundError):
    """Path does not exist in the drive."""

    def __init__(self, message: str, *, path: str) -> None:
        AliyunDriveError.__init__(self, message, path=path)
        self.path = path
        self.code = 404
        self.url = None


def wrap_error(error: E, message: str, **context: Any) -> E:
    """
    Annotate an error with what the caller was doing, keeping its type.

    Args:
        error: Error raised by a lower layer.
        message: Description of the failed operation, prepended to the message.
        **context: Extra context (path, node_id, ...) merged into the error's.

    Returns:
        A new error of the same class. Raise it ``from error``.
    """
    wrapped = type(error).__new__(type(error))
    wrapped.__dict__.update(error.__dict__)
    wrapped.message = f"{message}: {error.message}"
    wrapped.context = {**error.context, **context}
    Exception.__init__(wrapped, wrapped.message)
    return wrapped
