"""
Google Gemini transport — calls the Gemini REST API directly.
"""

import uuid
from typing import Iterator

import requests

from .base import (
    LLMClient, StreamPart, TextDelta, ToolCallPart, UsagePart, FinishPart,
)
from ..cli_display import log
from ..conversation import ASSISTANT, TOOL, Conversation, ToolCall
from ..editing.tools import ToolSpec


def _strip_defaults(schema):
    """Gemini function schemas reject the JSON-schema ``default`` keyword."""
    if isinstance(schema, dict):
        return {k: _strip_defaults(v) for k, v in schema.items() if k != "default"}
    if isinstance(schema, list):
        return [_strip_defaults(v) for v in schema]
    return schema


class GeminiClient(LLMClient):

    provider = "Gemini"

    def __init__(self, base_url: str, model: str, api_key: str, **kwargs):
        super().__init__(model, **kwargs)
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    # ── Request ──

    @staticmethod
    def _encode_contents(conversation: Conversation) -> list[dict]:
        contents: list[dict] = []
        for message in conversation:
            if message.role == TOOL:
                parts = [
                    {
                        "functionResponse": {
                            "name": result.tool_name,
                            "response": {
                                "name": result.tool_name,
                                "content": result.result,
                            },
                        }
                    }
                    for result in message.tool_results
                ]
                contents.append({"role": "user", "parts": parts})
            elif message.role == ASSISTANT:
                parts = []
                if message.content:
                    parts.append({"text": message.content})
                for call in message.tool_calls:
                    args = call.arguments if isinstance(call.arguments, dict) else {}
                    parts.append({"functionCall": {"name": call.name, "args": args}})
                contents.append({"role": "model", "parts": parts})
            else:
                contents.append({"role": "user",
                                 "parts": [{"text": message.content}]})
        return contents

    @staticmethod
    def _encode_tools(tools: list[ToolSpec]) -> list[dict]:
        declarations = []
        for spec in tools:
            declaration = {"name": spec.name, "description": spec.description}
            # Parameterless functions must omit the schema entirely
            if spec.parameters.get("properties"):
                declaration["parameters"] = _strip_defaults(spec.parameters)
            declarations.append(declaration)
        return [{"functionDeclarations": declarations}]

    def _build_request(self, conversation: Conversation,
                       tools: list[ToolSpec]) -> tuple[str, dict, dict]:
        payload = {
            "contents": self._encode_contents(conversation),
            "generationConfig": {
                "thinkingConfig": {"thinkingBudget": 0},
            },
        }
        if tools:
            payload["tools"] = self._encode_tools(tools)
        url = (
            f"{self.base_url}/models/{self.model}"
            f":streamGenerateContent?alt=sse&key={self.api_key}"
        )
        return url, {"Content-Type": "application/json"}, payload

    # ── Streaming response ──

    def _parse_stream(self, response: requests.Response) -> Iterator[StreamPart]:
        usage: dict = {}
        try:
            for chunk in self._iter_sse(response):
                # usageMetadata is cumulative; keep the latest
                if chunk.get("usageMetadata"):
                    usage = chunk["usageMetadata"]

                candidates = chunk.get("candidates") or []
                if not candidates:
                    continue
                candidate = candidates[0]
                for part in (candidate.get("content") or {}).get("parts") or []:
                    if part.get("thought"):
                        continue
                    if part.get("text"):
                        yield TextDelta(part["text"])
                    elif "functionCall" in part:
                        function_call = part["functionCall"]
                        call_id = function_call.get("id") or f"call_{uuid.uuid4().hex[:12]}"
                        yield ToolCallPart(ToolCall(
                            id=call_id,
                            name=function_call.get("name", ""),
                            arguments=function_call.get("args") or {},
                        ))

                finish_reason = candidate.get("finishReason")
                if finish_reason:
                    yield FinishPart(finish_reason)
        finally:
            response.close()

        if usage:
            prompt_tokens = usage.get("promptTokenCount", 0)
            completion_tokens = usage.get("candidatesTokenCount", 0)
            log.debug(f"[Gemini] Usage: prompt={prompt_tokens} "
                      f"completion={completion_tokens}")
            yield UsagePart(prompt_tokens, completion_tokens)
