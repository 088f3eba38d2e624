"""
OpenAI-compatible chat transport — works with OpenAI and any other provider
that implements the chat/completions API with streamed tool calls.
"""

import json
from typing import Iterator

import requests

from .base import (
    LLMClient, StreamPart, TextDelta, ToolCallPart, UsagePart, FinishPart,
)
from ..cli_display import log
from ..conversation import ASSISTANT, TOOL, Conversation, ToolCall
from ..editing.tools import ToolSpec


class OpenAIClient(LLMClient):

    provider = "OpenAI"

    def __init__(self, base_url: str, model: str, api_key: str, **kwargs):
        super().__init__(model, **kwargs)
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    # ── Request ──

    @staticmethod
    def _encode_messages(conversation: Conversation) -> list[dict]:
        messages: list[dict] = []
        for message in conversation:
            if message.role == TOOL:
                # One wire message per result, in call order
                for result in message.tool_results:
                    messages.append({
                        "role": "tool",
                        "tool_call_id": result.call_id,
                        "content": result.result,
                    })
            elif message.role == ASSISTANT:
                entry: dict = {"role": "assistant",
                               "content": message.content or None}
                if message.tool_calls:
                    entry["tool_calls"] = [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.name,
                                "arguments": (call.arguments
                                              if isinstance(call.arguments, str)
                                              else json.dumps(call.arguments)),
                            },
                        }
                        for call in message.tool_calls
                    ]
                messages.append(entry)
            else:
                messages.append({"role": "user", "content": message.content})
        return messages

    @staticmethod
    def _encode_tools(tools: list[ToolSpec]) -> list[dict]:
        return [
            {
                "type": "function",
                "function": {
                    "name": spec.name,
                    "description": spec.description,
                    "parameters": spec.parameters,
                },
            }
            for spec in tools
        ]

    def _build_request(self, conversation: Conversation,
                       tools: list[ToolSpec]) -> tuple[str, dict, dict]:
        payload = {
            "model": self.model,
            "messages": self._encode_messages(conversation),
            "stream": True,
            "stream_options": {"include_usage": True},
        }
        if tools:
            payload["tools"] = self._encode_tools(tools)
        url = f"{self.base_url}/chat/completions"
        return url, self._headers(), payload

    # ── Streaming response ──

    def _parse_stream(self, response: requests.Response) -> Iterator[StreamPart]:
        # Tool-call deltas arrive in fragments keyed by index
        pending: dict[int, dict] = {}

        try:
            for chunk in self._iter_sse(response):
                usage = chunk.get("usage")
                if usage:
                    prompt_tokens = usage.get("prompt_tokens", 0)
                    completion_tokens = usage.get("completion_tokens", 0)
                    log.debug(f"[OpenAI] Usage: prompt={prompt_tokens} "
                              f"completion={completion_tokens}")
                    yield UsagePart(prompt_tokens, completion_tokens)

                choices = chunk.get("choices") or []
                if not choices:
                    continue
                choice = choices[0]
                delta = choice.get("delta") or {}

                content = delta.get("content")
                if content:
                    yield TextDelta(content)

                for fragment in delta.get("tool_calls") or []:
                    index = fragment.get("index", len(pending))
                    entry = pending.setdefault(
                        index, {"id": "", "name": "", "arguments": []})
                    if fragment.get("id"):
                        entry["id"] = fragment["id"]
                    function = fragment.get("function") or {}
                    if function.get("name"):
                        entry["name"] += function["name"]
                    if function.get("arguments"):
                        entry["arguments"].append(function["arguments"])

                finish_reason = choice.get("finish_reason")
                if finish_reason:
                    yield from self._finalize_tool_calls(pending)
                    yield FinishPart(finish_reason)

            # Some servers end the stream without a finish_reason
            yield from self._finalize_tool_calls(pending)
        finally:
            response.close()

    @staticmethod
    def _finalize_tool_calls(pending: dict[int, dict]) -> list[ToolCallPart]:
        parts: list[ToolCallPart] = []
        for index in sorted(pending):
            entry = pending[index]
            raw_args = "".join(entry["arguments"]) or "{}"
            try:
                arguments = json.loads(raw_args)
            except json.JSONDecodeError:
                log.warning(f"[OpenAI] Invalid JSON arguments for "
                            f"{entry['name']}: {raw_args[:200]}")
                arguments = raw_args
            call_id = entry["id"] or f"call_{index}"
            parts.append(ToolCallPart(ToolCall(id=call_id, name=entry["name"],
                                               arguments=arguments)))
        pending.clear()
        return parts
