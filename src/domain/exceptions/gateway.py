from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"
    HANDLER_FAULT = "handler_fault"
    INITIALIZATION_FAULT = "initialization_fault"


class GatewayError(Exception):
    """Base exception for gateway failures that are raised, not returned."""

    kind: FailureKind = FailureKind.HANDLER_FAULT


class EndpointNotFound(GatewayError):
    """No dispatch-table entry matches the requested path."""

    kind = FailureKind.NOT_FOUND

    def __init__(self, path: str) -> None:
        super().__init__(f"Unknown endpoint: {path}")
        self.path = path


class InitializationError(GatewayError):
    """The dataset could not be opened."""

    kind = FailureKind.INITIALIZATION_FAULT


@dataclass(frozen=True, slots=True)
class Failure:
    kind: FailureKind
    message: str


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Result of one gateway operation: a value or a typed failure."""

    value: T | None = None
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def unavailable(self) -> bool:
        return self.failure is not None and self.failure.kind is FailureKind.UNAVAILABLE

    def value_or(self, default: T) -> T:
        if self.failure is not None or self.value is None:
            return default
        return self.value

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: FailureKind, message: str) -> "Outcome[T]":
        return cls(failure=Failure(kind=kind, message=message))
