from __future__ import annotations

"""
Boundary Result Types.

Components that can fail in an expected way (unknown document, engine
crash) return Ok or Err instead of raising, so the failure mode is part of
the signature. Err values are terminal data: callers translate them into
an empty or sentinel display, never into an exception.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(Enum):
    """Taxonomy of recoverable failures inside the cockpit core."""
    NOT_FOUND = "not_found"
    ENGINE_FAILURE = "engine_failure"
    FILESYSTEM_STAT_FAILURE = "filesystem_stat_failure"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""
    value: T
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Err:
    """
    Failed outcome.

    Attributes:
        kind: Failure category.
        message: Diagnostic text for logs.
    """
    kind: ErrorKind
    message: str = ""
    ok: bool = field(default=False, init=False)


Result = Union[Ok[T], Err]


def not_found(message: str) -> Err:
    return Err(ErrorKind.NOT_FOUND, message)


def engine_failure(message: str) -> Err:
    return Err(ErrorKind.ENGINE_FAILURE, message)
