"""Error values and exceptions shared by the documentation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorType(str, Enum):
    """Broad classification used to map failures onto user-facing outcomes."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FAILURE = "failure"


@dataclass(frozen=True)
class Error:
    """Stable error description: short code, readable message, optional field."""

    code: str
    message: str
    type: ErrorType
    invalid_field: Optional[str] = None

    @classmethod
    def failure(cls, code: str, message: str) -> "Error":
        return cls(code=code, message=message, type=ErrorType.FAILURE)

    @classmethod
    def not_found(cls, name: str | None = None, *, code: str = "record.not.found") -> "Error":
        return cls(code=code, message=f"{name or 'value'} not found", type=ErrorType.NOT_FOUND)

    def __str__(self) -> str:
        return self.message


class PipelineError(RuntimeError):
    """Raised when a pipeline stage fails as a whole."""

    def __init__(self, error: Error) -> None:
        super().__init__(error.message)
        self.error = error

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def is_not_found(self) -> bool:
        return self.error.type is ErrorType.NOT_FOUND


class ExtractionError(PipelineError):
    """Raised when the project cannot be turned into a declaration model."""


class PromptError(PipelineError):
    """Raised when a prompt cannot be composed for a source file."""


class GenerationError(PipelineError):
    """Raised when the generation service fails to answer a request."""


class StorageError(PipelineError):
    """Raised when the object store or metadata store rejects an operation."""


class OperationCancelled(RuntimeError):
    """Raised at a suspension point once cancellation has been requested."""


@dataclass(frozen=True)
class FileOutcome(Generic[T]):
    """Result of a per-file step: a value, or the error that made it skip."""

    path: str
    value: Optional[T] = None
    error: Optional[Error] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, path: str, value: T) -> "FileOutcome[T]":
        return cls(path=path, value=value)

    @classmethod
    def skipped(cls, path: str, error: Error) -> "FileOutcome[T]":
        return cls(path=path, error=error)


__all__ = [
    "Error",
    "ErrorType",
    "ExtractionError",
    "FileOutcome",
    "GenerationError",
    "OperationCancelled",
    "PipelineError",
    "PromptError",
    "StorageError",
]
