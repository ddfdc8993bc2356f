import time
from typing import List, Optional


class AppError(Exception):
    """Base error carried through Result values and raised by unwrap()."""

    kind = "AppError"
    default_retryable = False

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        *,
        path: Optional[str] = None,
        retryable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.path = path
        self.retryable = self.default_retryable if retryable is None else retryable
        self.timestamp = time.time()

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class NotFoundError(AppError):
    kind = "NotFound"


class ParseError(AppError):
    kind = "ParseError"


class FileSystemError(AppError):
    kind = "IOError"


class ValidationError(AppError):
    kind = "ValidationError"

    def __init__(self, message: str, errors: Optional[List[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = list(errors or [])


class CacheError(AppError):
    kind = "CacheError"


class NetworkError(AppError):
    kind = "NetworkError"
    default_retryable = True


def format_error(error: AppError) -> str:
    stamp = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(error.timestamp))
    message = f"[{stamp}] {error.kind}: {error.message}"
    if error.path:
        message += f" (path: {error.path})"
    if error.cause is not None:
        message += f"\nCause: {type(error.cause).__name__}: {error.cause}"
    return message
