"""Prompt rendering for documentation generation."""

from .builder import InstructionTemplate, PromptAssembler
from .constants import DOCUMENT_MARKER

__all__ = ["DOCUMENT_MARKER", "InstructionTemplate", "PromptAssembler"]
