"""Scripted model transport for driving the agent loop in tests."""

from ai_secretary.conversation import ToolCall
from ai_secretary.llm.base import FinishPart, ModelStream, TextDelta, ToolCallPart


def text_turn(text: str) -> list:
    return [TextDelta(text), FinishPart("stop")]


def tool_turn(*calls: tuple, text: str = "") -> list:
    """Build one model turn emitting ``(name, arguments)`` tool calls."""
    parts = [TextDelta(text)] if text else []
    for i, (name, arguments) in enumerate(calls):
        parts.append(ToolCallPart(ToolCall(id=f"call_{name}_{i}", name=name,
                                           arguments=arguments)))
    parts.append(FinishPart("tool_calls"))
    return parts


class ScriptedTransport:
    """Replays a fixed list of turns, one per ``submit`` call."""

    model = "scripted"

    def __init__(self, turns: list[list]):
        self.turns = list(turns)
        self.submissions: list[list] = []
        self.tool_names: list[list[str]] = []

    def submit(self, conversation, tools):
        self.submissions.append(list(conversation))
        self.tool_names.append([spec.name for spec in tools])
        if not self.turns:
            raise AssertionError("ScriptedTransport ran out of turns")
        return ModelStream(iter(self.turns.pop(0)), model=self.model)

    @property
    def round_trips(self) -> int:
        return len(self.submissions)
