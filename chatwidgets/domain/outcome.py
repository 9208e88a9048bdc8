"""Success-or-error result carried by agent invocations."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from chatwidgets.domain.errors import OutcomeAccessError

T = TypeVar("T")
R = TypeVar("R")

_MISSING: Any = object()


@dataclass(frozen=True)
class OutcomeError:
    """Machine-readable code plus a human-readable message."""

    code: str
    message: str


class Outcome(Generic[T]):
    """Either a value or an ``OutcomeError``, never both.

    Build instances with ``Outcome.ok`` or ``Outcome.fail``. Reading ``value``
    from a failed outcome raises ``OutcomeAccessError``; use ``match`` or
    check ``is_ok`` first.
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: Any = _MISSING, error: OutcomeError | None = None) -> None:
        if (value is _MISSING) == (error is None):
            raise ValueError("Outcome needs exactly one of value or error")
        self._value = value
        self._error = error

    @classmethod
    def ok(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, code: str, message: str) -> "Outcome[T]":
        return cls(error=OutcomeError(code=code, message=message))

    @property
    def is_ok(self) -> bool:
        return self._error is None

    @property
    def is_error(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise OutcomeAccessError(
                message=f"Outcome holds error {self._error.code}: {self._error.message}",
                details={"error_code": self._error.code},
            )
        return self._value

    @property
    def error(self) -> OutcomeError:
        if self._error is None:
            raise OutcomeAccessError(message="Outcome holds a value, not an error")
        return self._error

    def match(
        self,
        on_ok: Callable[[T], R],
        on_error: Callable[[OutcomeError], R],
    ) -> R:
        """Fold both variants into a single result."""
        if self._error is None:
            return on_ok(self._value)
        return on_error(self._error)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Outcome):
            return NotImplemented
        return self._value == other._value and self._error == other._error

    def __repr__(self) -> str:
        if self._error is None:
            return f"Outcome.ok({self._value!r})"
        return f"Outcome.fail({self._error.code!r}, {self._error.message!r})"
