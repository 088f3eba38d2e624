"""
Editor agent: the multi-turn loop between the model and the document tools.

Each iteration streams one model response, runs the tool calls it contains
against the buffer (one at a time, in emission order) and feeds the results
back.  The loop stops as soon as the model answers without calling a tool.
"""

from __future__ import annotations

import enum

from .cli_display import log
from .conversation import Conversation, ToolCall, ToolResult
from .editing.tools import InternalToolError, ToolRegistry
from .llm.base import FinishPart, TextDelta, ToolCallPart, UsagePart


class AgentState(enum.Enum):
    IDLE = "idle"
    AWAITING_MODEL_RESPONSE = "awaiting-model-response"
    STREAMING = "streaming"
    DISPATCHING_TOOLS = "dispatching-tools"


class EditorAgent:
    """Drives one conversation.

    *transport* is anything with ``submit(conversation, tools)`` returning a
    :class:`~ai_secretary.llm.base.ModelStream`.  *display* receives stream
    events (see :class:`~ai_secretary.cli_display.StreamPrinter`); pass
    ``None`` to run silently.
    """

    def __init__(self, prompt: str, registry: ToolRegistry, transport,
                 display=None):
        self.registry = registry
        self.transport = transport
        self.display = display
        self.conversation = Conversation()
        self.conversation.add_user(prompt)
        self.state = AgentState.IDLE
        self.round_trips = 0

    def run(self) -> int:
        """Iterate until the model stops calling tools.

        Returns the number of model round trips made by this run.
        """
        rounds = 0
        try:
            while True:
                rounds += 1
                if not self.iteration():
                    break
        finally:
            self.state = AgentState.IDLE
        return rounds

    def feedback(self, text: str) -> int:
        self.conversation.add_user(text)
        return self.run()

    def iteration(self) -> bool:
        """Run one model round trip. Returns True if another is needed."""
        self.state = AgentState.AWAITING_MODEL_RESPONSE
        stream = self.transport.submit(self.conversation, self.registry.specs())
        self.round_trips += 1

        self.state = AgentState.STREAMING
        for part in stream:
            self._show(part)
        if self.display is not None:
            self.display.end_turn()

        for message in stream.messages:
            self.conversation.append(message)

        self.state = AgentState.DISPATCHING_TOOLS
        results = [self._call_tool(call) for call in stream.tool_calls]
        if not results:
            self.state = AgentState.IDLE
            return False

        self.conversation.add_tool_results(results)
        return True

    def _call_tool(self, call: ToolCall) -> ToolResult:
        try:
            result = self.registry.dispatch(call)
        except Exception as e:
            failure = InternalToolError(call.name, e)
            log.exception(f"Error calling {call.name} with args {call.arguments!r}")
            result = ToolResult(call_id=call.id, tool_name=call.name,
                                is_error=True, result=str(failure))
        if self.display is not None:
            self.display.tool_result(call.name, result.is_error, result.result)
        return result

    def _show(self, part) -> None:
        if self.display is None:
            return
        if isinstance(part, TextDelta):
            self.display.text(part.text)
        elif isinstance(part, ToolCallPart):
            self.display.tool_call(part.call.name, part.call.arguments)
        elif isinstance(part, FinishPart):
            self.display.event(f"finish: {part.reason}")
        elif isinstance(part, UsagePart):
            self.display.event("usage")
