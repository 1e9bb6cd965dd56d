"""
Outcome type returned by the identity and team services.

Services never raise for expected failures. Each operation returns either
Ok(value) or Err(kind, message); the HTTP layer maps ErrorKind to a status
code in one place (scrims.api.errors).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure categories a service operation can report."""
    INVALID_ARGUMENT = "invalid_argument"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Ok[T], Err]


def invalid_argument(message: str) -> Err:
    return Err(ErrorKind.INVALID_ARGUMENT, message)


def already_exists(message: str) -> Err:
    return Err(ErrorKind.ALREADY_EXISTS, message)


def not_found(message: str) -> Err:
    return Err(ErrorKind.NOT_FOUND, message)


def invalid_credentials(message: str) -> Err:
    return Err(ErrorKind.INVALID_CREDENTIALS, message)


def internal(message: str) -> Err:
    return Err(ErrorKind.INTERNAL, message)


class DuplicateRecordError(Exception):
    """A store insert was rejected by a unique constraint."""


class ConfigurationError(RuntimeError):
    """Required configuration is missing or invalid."""
