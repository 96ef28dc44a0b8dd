"""Streaming adapters around the generation service (Ollama / OpenAI-compatible)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..cancellation import CancellationToken, ensure_token
from ..config import LLMConfig
from ..errors import Error, GenerationError
from .session import ChatSession

_AUTO_API_KEY = object()

Message = Dict[str, str]


@dataclass
class LLMRequest:
    """Represents one streamed chat request."""

    messages: List[Message]
    model: str
    api: str
    base_url: str
    api_key: Optional[str]
    temperature: Optional[float]
    request_timeout: Optional[float]


StreamTransport = Callable[[LLMRequest, CancellationToken], Iterator[str]]


class LLMRunner:
    """Streams chat completions from the configured generation service."""

    DEFAULT_MODEL = "llama3"
    DEFAULT_BASE_URL = "http://localhost:11434"
    ENV_MODEL_KEYS = ("DOCUMATE_LLM_MODEL", "OLLAMA_MODEL")
    ENV_BASE_URL_KEYS = ("DOCUMATE_LLM_BASE_URL", "OLLAMA_HOST")
    ENV_API_KEY_KEYS = ("DOCUMATE_LLM_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        api: str = "ollama",
        base_url: str | None = None,
        api_key: str | None | object = _AUTO_API_KEY,
        temperature: Optional[float] = None,
        request_timeout: Optional[float] = 300.0,
        transport: StreamTransport | None = None,
    ) -> None:
        self.model = model or self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        self.api = api
        self.base_url = self._normalize_base_url(
            base_url or self._first_env_value(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        )
        if api_key is _AUTO_API_KEY:
            self.api_key = self._first_env_value(self.ENV_API_KEY_KEYS)
        else:
            self.api_key = api_key  # type: ignore[assignment]
        self.temperature = temperature
        self.request_timeout = request_timeout
        if transport is not None:
            self._transport = transport
        elif api == "openai":
            self._transport = self._openai_transport
        elif api == "ollama":
            self._transport = self._ollama_transport
        else:
            raise ValueError(f"Unsupported generation api '{api}'")

    @classmethod
    def from_config(cls, config: LLMConfig, *, transport: StreamTransport | None = None) -> "LLMRunner":
        return cls(
            config.model,
            api=config.api,
            base_url=config.base_url,
            api_key=config.api_key or _AUTO_API_KEY,
            temperature=config.temperature,
            request_timeout=config.request_timeout,
            transport=transport,
        )

    def open_session(self, *, system: str | None = None) -> ChatSession:
        """Start a conversation; the session owns its history for one pipeline run."""
        return ChatSession(self.stream, system=system)

    def stream(
        self, messages: Sequence[Message], cancellation: CancellationToken | None = None
    ) -> Iterator[str]:
        request = LLMRequest(
            messages=list(messages),
            model=self.model,
            api=self.api,
            base_url=self.base_url,
            api_key=self.api_key,
            temperature=self.temperature,
            request_timeout=self.request_timeout,
        )
        return self._transport(request, ensure_token(cancellation))

    # ------------------------------------------------------------------
    # HTTP transports

    @staticmethod
    def _ollama_transport(request: LLMRequest, cancellation: CancellationToken) -> Iterator[str]:
        payload: dict[str, object] = {
            "model": request.model,
            "messages": request.messages,
            "stream": True,
        }
        if request.temperature is not None:
            payload["options"] = {"temperature": request.temperature}

        for line in LLMRunner._stream_lines(f"{request.base_url}/api/chat", payload, request, cancellation):
            chunk = LLMRunner._decode_json(line)
            if "error" in chunk:
                raise GenerationError(
                    Error.failure("generation.service", f"Generation service error: {chunk['error']}")
                )
            message = chunk.get("message")
            if isinstance(message, dict):
                content = message.get("content")
                if isinstance(content, str) and content:
                    yield content
            if chunk.get("done"):
                return

    @staticmethod
    def _openai_transport(request: LLMRequest, cancellation: CancellationToken) -> Iterator[str]:
        payload: dict[str, object] = {
            "model": request.model,
            "messages": request.messages,
            "stream": True,
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature

        for line in LLMRunner._stream_lines(
            f"{request.base_url}/chat/completions", payload, request, cancellation
        ):
            if not line.startswith("data:"):
                continue
            data = line[len("data:") :].strip()
            if data == "[DONE]":
                return
            content = LLMRunner._extract_delta(LLMRunner._decode_json(data))
            if content:
                yield content

    @staticmethod
    def _stream_lines(
        endpoint: str,
        payload: dict[str, object],
        request: LLMRequest,
        cancellation: CancellationToken,
    ) -> Iterator[str]:
        cancellation.raise_if_cancelled("generation request")
        data = json.dumps(payload).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"
        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.request_timeout or 300.0

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                for raw_line in response:
                    cancellation.raise_if_cancelled("generation stream")
                    line = raw_line.decode("utf-8", errors="replace").strip()
                    if line:
                        yield line
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise GenerationError(
                Error.failure(
                    "generation.transport",
                    f"Generation service failed with status {exc.code}: {message}",
                )
            ) from exc
        except URLError as exc:
            raise GenerationError(
                Error.failure("generation.transport", f"Generation service unreachable: {exc.reason}")
            ) from exc
        except OSError as exc:
            raise GenerationError(
                Error.failure("generation.transport", f"Generation stream interrupted: {exc}")
            ) from exc

    @staticmethod
    def _decode_json(line: str) -> dict[str, object]:
        try:
            decoded = json.loads(line)
        except json.JSONDecodeError as exc:
            raise GenerationError(
                Error.failure("generation.service", "Generation service returned invalid JSON")
            ) from exc
        if not isinstance(decoded, dict):
            raise GenerationError(
                Error.failure("generation.service", "Generation service returned an unexpected payload")
            )
        return decoded

    @staticmethod
    def _extract_delta(payload: dict[str, object]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        delta = first.get("delta")
        if isinstance(delta, dict):
            content = delta.get("content")
            if isinstance(content, str):
                return content
        text = first.get("text")
        if isinstance(text, str):
            return text
        return ""

    @staticmethod
    def _normalize_base_url(url: str) -> str:
        url = url.strip()
        if "://" not in url:
            url = f"http://{url}"
        return url.rstrip("/")

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


__all__ = ["LLMRequest", "LLMRunner", "StreamTransport"]
