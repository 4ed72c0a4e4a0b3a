"""Tagged outcomes returned by the inventory, request and donor services."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_GROUP = "DUPLICATE_GROUP"
    INVALID_BOUNDS = "INVALID_BOUNDS"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"


@dataclass(frozen=True)
class ServiceError:
    """Why an operation was rejected.

    ``fields`` maps offending input names to a message and is only filled
    for validation failures.
    """

    kind: ErrorKind
    message: str
    fields: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, fields: Optional[Dict[str, str]] = None) -> "Result":
        return cls(error=ServiceError(kind, message, dict(fields or {})))

    @classmethod
    def invalid(cls, fields: Dict[str, str], message: str = "Invalid input data provided") -> "Result":
        return cls.failure(ErrorKind.VALIDATION_ERROR, message, fields)


def form_errors(form) -> Dict[str, str]:
    """Flatten a bound Django form's errors to one message per field."""

    return {name: " ".join(str(message) for message in messages) for name, messages in form.errors.items()}
