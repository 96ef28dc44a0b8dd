"""Conversation session handle used for one documentation run."""

from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Sequence

from ..cancellation import CancellationToken, ensure_token

Message = Dict[str, str]
StreamFn = Callable[[Sequence[Message], CancellationToken], Iterator[str]]


class ChatSession:
    """Keeps the chat history and streams replies token by token.

    A completed exchange (prompt plus assembled reply) is appended to the
    history so later prompts see it as context. An exchange that fails or is
    cancelled part way leaves the history untouched.
    """

    def __init__(self, stream: StreamFn, *, system: str | None = None) -> None:
        self._stream = stream
        self.messages: List[Message] = []
        if system:
            self.messages.append({"role": "system", "content": system})

    def send(self, prompt: str, *, cancellation: CancellationToken | None = None) -> Iterator[str]:
        token = ensure_token(cancellation)
        token.raise_if_cancelled("generation request")
        user_message = {"role": "user", "content": prompt}
        reply: List[str] = []
        for chunk in self._stream([*self.messages, user_message], token):
            token.raise_if_cancelled("generation stream")
            reply.append(chunk)
            yield chunk
        self.messages.append(user_message)
        self.messages.append({"role": "assistant", "content": "".join(reply)})

    def drain(self, prompt: str, *, cancellation: CancellationToken | None = None) -> None:
        """Send ``prompt`` and consume the reply without keeping its tokens."""
        for _ in self.send(prompt, cancellation=cancellation):
            pass

    def complete(self, prompt: str, *, cancellation: CancellationToken | None = None) -> str:
        """Send ``prompt`` and join every streamed token with no separator."""
        return "".join(self.send(prompt, cancellation=cancellation))


__all__ = ["ChatSession"]
