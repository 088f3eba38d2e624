"""
Conversation log shared between the agent loop and the model transports.

Messages are provider-neutral; each transport converts them to its own wire
format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

USER = "user"
ASSISTANT = "assistant"
TOOL = "tool"

ROLES = (USER, ASSISTANT, TOOL)


@dataclass
class ToolCall:
    """A tool invocation emitted by the model."""
    id: str
    name: str
    # Decoded JSON object; the raw string when the model sent invalid JSON.
    arguments: Any = field(default_factory=dict)


@dataclass
class ToolResult:
    """The answer to one :class:`ToolCall`."""
    call_id: str
    tool_name: str
    is_error: bool
    result: str


@dataclass
class Message:
    role: str
    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_results: list[ToolResult] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")


class Conversation:
    """Append-only message log owned by one agent loop."""

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def append(self, message: Message) -> None:
        if message.role == TOOL and not message.tool_results:
            raise ValueError("A tool message must carry at least one result")
        self._messages.append(message)

    def add_user(self, text: str) -> Message:
        message = Message(role=USER, content=text)
        self.append(message)
        return message

    def add_tool_results(self, results: list[ToolResult]) -> Message:
        message = Message(role=TOOL, tool_results=list(results))
        self.append(message)
        return message

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __len__(self) -> int:
        return len(self._messages)
