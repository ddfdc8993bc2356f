from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from blogo.errors import AppError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success value or AppError, returned by the service layer."""

    value: Optional[T] = None
    error: Optional[AppError] = None

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def ok(value: T) -> Result[T]:
    return Result(value=value)


def err(error: AppError) -> Result:
    return Result(error=error)
