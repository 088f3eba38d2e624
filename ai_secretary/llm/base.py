import json
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Union

import requests

from ..cli_display import token_tracker, log
from ..conversation import ASSISTANT, Conversation, Message, ToolCall
from ..editing.tools import ToolSpec


class LLMError(Exception):
    """Raised when the model transport fails."""


# ── Stream parts ──

@dataclass
class TextDelta:
    text: str


@dataclass
class ToolCallPart:
    call: ToolCall


@dataclass
class UsagePart:
    prompt_tokens: int
    completion_tokens: int


@dataclass
class FinishPart:
    reason: str


StreamPart = Union[TextDelta, ToolCallPart, UsagePart, FinishPart]


class ModelStream:
    """One model turn: a lazy, single-use sequence of stream parts.

    Once the parts are exhausted, :attr:`tool_calls` and :attr:`messages`
    hold the finalized tool calls and the assistant message to append to
    the conversation.
    """

    def __init__(self, parts: Iterator[StreamPart], model: str = ""):
        self._parts = parts
        self._model = model
        self._started = False
        self._finished = False
        self._text: list[str] = []
        self._tool_calls: list[ToolCall] = []

    def __iter__(self) -> Iterator[StreamPart]:
        if self._started:
            raise LLMError("Model stream can only be consumed once")
        self._started = True
        return self._consume()

    def _consume(self) -> Iterator[StreamPart]:
        try:
            for part in self._parts:
                if isinstance(part, TextDelta):
                    self._text.append(part.text)
                elif isinstance(part, ToolCallPart):
                    self._tool_calls.append(part.call)
                elif isinstance(part, UsagePart):
                    token_tracker.record(part.prompt_tokens, part.completion_tokens)
                yield part
        except requests.RequestException as e:
            raise LLMError(f"Model stream interrupted: {e}") from e
        self._finished = True

    def _require_finished(self) -> None:
        if not self._finished:
            raise LLMError("Model stream has not been fully consumed")

    @property
    def text(self) -> str:
        self._require_finished()
        return "".join(self._text)

    @property
    def tool_calls(self) -> list[ToolCall]:
        self._require_finished()
        return list(self._tool_calls)

    @property
    def messages(self) -> list[Message]:
        self._require_finished()
        text = "".join(self._text)
        if not text and not self._tool_calls:
            return []
        return [Message(role=ASSISTANT, content=text,
                        tool_calls=list(self._tool_calls))]


class LLMClient(ABC):
    """Base class for streaming chat transports with tool calling."""

    provider = ""

    def __init__(self, model: str, max_retries: int = 3,
                 retry_delay: float = 2.0, timeout: float = 300.0):
        self.model = model
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

    # ── Public entry point ──

    def submit(self, conversation: Conversation,
               tools: list[ToolSpec]) -> ModelStream:
        """Send the conversation and return the streaming response.

        Opening the request is retried with jittered exponential backoff;
        once the stream has started it is never restarted.
        """
        url, headers, payload = self._build_request(conversation, tools)
        log.debug(f"[{self.provider}] Request ({len(conversation)} messages):\n"
                  f"{json.dumps(payload, ensure_ascii=False)[:4000]}")
        response = self._post_with_retry(url, headers, payload)
        return ModelStream(self._parse_stream(response), model=self.model)

    def _post_with_retry(self, url: str, headers: dict,
                         payload: dict) -> requests.Response:
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                response = requests.post(url, headers=headers, json=payload,
                                         stream=True, timeout=(10, self.timeout))
                if response.status_code >= 400:
                    body = response.text[:500]
                    status = response.status_code
                    response.close()
                    if status != 429 and status < 500:
                        raise LLMError(f"[{self.provider}] HTTP {status}: {body}")
                    raise requests.HTTPError(f"HTTP {status}: {body}")
                return response
            except LLMError:
                raise
            except requests.RequestException as e:
                last_error = e
                log.warning(
                    f"[{self.provider}] Error on attempt {attempt}/{self.max_retries}: {e}")

                if attempt < self.max_retries:
                    # Jittered exponential backoff
                    wait = self.retry_delay * (2 ** (attempt - 1))
                    jitter = wait * 0.1 * random.random()

                    # Special handling for 429: wait longer
                    if "429" in str(e):
                        wait *= 2
                        log.info(f"[{self.provider}] Rate limit detected (429). "
                                 f"Backing off for {wait:.1f}s")

                    time.sleep(wait + jitter)

        raise LLMError(
            f"[{self.provider}] Request failed after {self.max_retries} retries: "
            f"{last_error}")

    @staticmethod
    def _iter_sse(response: requests.Response) -> Iterator[dict]:
        """Yield the decoded JSON payload of every ``data:`` line."""
        for line in response.iter_lines(decode_unicode=True):
            if not line or not line.startswith("data:"):
                continue
            data_str = line[5:].strip()
            if data_str == "[DONE]":
                break
            try:
                yield json.loads(data_str)
            except json.JSONDecodeError:
                log.debug(f"Skipping undecodable stream line: {data_str[:200]}")

    # ── Subclass hooks ──

    @abstractmethod
    def _build_request(self, conversation: Conversation,
                       tools: list[ToolSpec]) -> tuple[str, dict, dict]:
        """Return ``(url, headers, payload)`` for a streaming request."""

    @abstractmethod
    def _parse_stream(self, response: requests.Response) -> Iterator[StreamPart]:
        """Turn the raw streaming response into stream parts."""
