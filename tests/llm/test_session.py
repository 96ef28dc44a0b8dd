"""Tests for the chat session history handling."""

from __future__ import annotations

import pytest

from documate.cancellation import CancellationToken
from documate.errors import Error, GenerationError, OperationCancelled
from documate.llm.session import ChatSession
from tests._fixtures.fakes import ScriptedStream


def test_session_joins_tokens_without_separator() -> None:
    stream = ScriptedStream({"hello": ["# File Overview", "\n", "Body"]})
    session = ChatSession(stream)

    assert session.complete("hello") == "# File Overview\nBody"


def test_session_keeps_completed_exchanges_in_history() -> None:
    stream = ScriptedStream({"first": ["one"], "second": ["two"]})
    session = ChatSession(stream, system="be brief")

    session.drain("first")
    session.complete("second")

    assert stream.histories[1] == [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "first"},
        {"role": "assistant", "content": "one"},
        {"role": "user", "content": "second"},
    ]
    assert session.messages[-1] == {"role": "assistant", "content": "two"}


def test_session_drops_failed_exchange_from_history() -> None:
    failure = GenerationError(Error.failure("generation.service", "boom"))
    stream = ScriptedStream({"bad": failure, "good": ["ok"]})
    session = ChatSession(stream)

    with pytest.raises(GenerationError):
        session.complete("bad")
    session.complete("good")

    assert [m["content"] for m in session.messages] == ["good", "ok"]


def test_session_checks_cancellation_before_each_token() -> None:
    token = CancellationToken()
    stream = ScriptedStream({"long": ["a", lambda: token.cancel("stop"), "b"]})
    session = ChatSession(stream)
    received = []

    with pytest.raises(OperationCancelled):
        for chunk in session.send("long", cancellation=token):
            received.append(chunk)

    assert received == ["a"]
    assert session.messages == []


def test_session_refuses_to_start_when_already_cancelled() -> None:
    token = CancellationToken()
    token.cancel()
    stream = ScriptedStream()

    with pytest.raises(OperationCancelled):
        ChatSession(stream).complete("anything", cancellation=token)

    assert stream.prompts == []
