"""Base classes for source parsers."""

from abc import ABC, abstractmethod
from typing import Tuple

from ..models import SourceFile


class SyntaxFailure(ValueError):
    """Raised when a source file cannot be parsed into declarations."""


class SourceParser(ABC):
    """Contract for parsers turning one source file into a declaration model."""

    suffixes: Tuple[str, ...] = ()

    @abstractmethod
    def parse(self, path: str, text: str) -> SourceFile:
        """Return the declarations found in ``text``; raise SyntaxFailure on malformed input."""
