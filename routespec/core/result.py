"""Result types for railway-oriented programming.

Request-time failures in the validation pipeline, document fetches and
document merges are returned as data instead of raised. Build-time and
startup-time failures stay exceptions because they are fatal.

Usage:
    def parse_port(raw: str) -> Result[int, str]:
        if not raw.isdigit():
            return Failure(error="port must be numeric")
        return Success(value=int(raw))

    match parse_port("8080"):
        case Success(value=port):
            print(port)
        case Failure(error=error):
            print(error)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Represents a successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Represents a failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


type Result[T, E] = Success[T] | Failure[E]
