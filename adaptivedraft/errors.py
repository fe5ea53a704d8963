"""Error taxonomy and the result type returned by fallible drafting operations.

Interactive operations never raise across the tool/host boundary; they
return an :class:`OpResult` carrying either a value or an error kind plus
a human readable message.  Callers outside an interactive session can call
:meth:`OpResult.unwrap` to get the matching exception instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    GEOMETRY_DEGENERATE = "geometry_degenerate"
    INPUT_INCOMPLETE = "input_incomplete"
    CONSTRAINT_VIOLATED = "constraint_violated"
    SELECTION_INVALID = "selection_invalid"


class DraftingError(Exception):
    kind: ErrorKind = ErrorKind.GEOMETRY_DEGENERATE


class GeometryDegenerate(DraftingError, ValueError):
    """Zero-length vectors, parallel lines, non-positive radii."""

    kind = ErrorKind.GEOMETRY_DEGENERATE


class InputIncomplete(DraftingError):
    kind = ErrorKind.INPUT_INCOMPLETE


class ConstraintViolated(DraftingError):
    """A construction is well defined but does not fit the given segments."""

    kind = ErrorKind.CONSTRAINT_VIOLATED


class SelectionInvalid(DraftingError):
    kind = ErrorKind.SELECTION_INVALID


class ConfigurationError(ValueError):
    """Invalid host configuration; raised at construction time."""


class ToolConfigurationError(ConfigurationError):
    pass


_EXCEPTIONS = {
    ErrorKind.GEOMETRY_DEGENERATE: GeometryDegenerate,
    ErrorKind.INPUT_INCOMPLETE: InputIncomplete,
    ErrorKind.CONSTRAINT_VIOLATED: ConstraintViolated,
    ErrorKind.SELECTION_INVALID: SelectionInvalid,
}


@dataclass(frozen=True)
class OpResult(Generic[T]):
    value: Optional[T] = None
    kind: Optional[ErrorKind] = None
    message: str = ""
    reason: Optional[Enum] = None

    @staticmethod
    def success(value: T, message: str = "") -> "OpResult[T]":
        return OpResult(value=value, message=message)

    @staticmethod
    def failure(kind: ErrorKind, message: str, reason: Optional[Enum] = None) -> "OpResult[T]":
        return OpResult(kind=kind, message=message, reason=reason)

    @staticmethod
    def from_error(exc: DraftingError) -> "OpResult[T]":
        return OpResult(kind=exc.kind, message=str(exc))

    @property
    def ok(self) -> bool:
        return self.kind is None

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> T:
        if self.kind is not None:
            raise _EXCEPTIONS[self.kind](self.message)
        return self.value  # type: ignore[return-value]


__all__ = [
    "ErrorKind",
    "DraftingError",
    "GeometryDegenerate",
    "InputIncomplete",
    "ConstraintViolated",
    "SelectionInvalid",
    "ConfigurationError",
    "ToolConfigurationError",
    "OpResult",
]
