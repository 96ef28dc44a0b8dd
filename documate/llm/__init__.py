"""Generation service adapters."""

from .runner import LLMRequest, LLMRunner
from .session import ChatSession

__all__ = ["ChatSession", "LLMRequest", "LLMRunner"]
