from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from docstore_lib.errors import NotFoundError

T = TypeVar("T")
U = TypeVar("U")

_ABSENT: Any = object()


@dataclass(frozen=True)
class Result(Generic[T]):
    """Present/absent envelope returned by every read.

    An absent result means the read succeeded and nothing is there; failures
    are raised instead. A present result may still hold a falsy value such
    as an empty string.
    """

    _value: Any = _ABSENT

    @classmethod
    def of(cls, value: T) -> "Result[T]":
        return cls(value)

    @classmethod
    def absent(cls) -> "Result[T]":
        return cls()

    @property
    def present(self) -> bool:
        return self._value is not _ABSENT

    @property
    def value(self) -> Optional[T]:
        return self._value if self.present else None

    def get(self) -> T:
        if not self.present:
            raise NotFoundError("Result is absent")
        return self._value

    def or_else(self, default: T) -> T:
        return self._value if self.present else default

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        if not self.present:
            return Result()
        return Result(fn(self._value))

    def __bool__(self) -> bool:
        return self.present

    def __repr__(self) -> str:
        if not self.present:
            return "Result.absent()"
        return f"Result.of({self._value!r})"
