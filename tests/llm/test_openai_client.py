"""Tests for the OpenAI-compatible streaming transport."""

import json
from unittest.mock import MagicMock

import pytest

from ai_secretary.conversation import (
    ASSISTANT, Conversation, Message, ToolCall, ToolResult,
)
from ai_secretary.editing.buffer import DocumentBuffer
from ai_secretary.editing.tools import ToolRegistry
from ai_secretary.llm.base import FinishPart, TextDelta, ToolCallPart, UsagePart
from ai_secretary.llm.openai_client import OpenAIClient


def _sse(*chunks) -> list[str]:
    lines = []
    for chunk in chunks:
        lines.append("data: " + json.dumps(chunk))
        lines.append("")
    lines.append("data: [DONE]")
    return lines


def _fake_response(lines, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.text = ""
    response.iter_lines.return_value = iter(lines)
    return response


def _client():
    return OpenAIClient(base_url="https://api.example.com/v1/", model="gpt-test",
                        api_key="sk-test", max_retries=1, retry_delay=0)


def _conversation():
    conversation = Conversation()
    conversation.add_user("Edit please")
    return conversation


def _specs():
    return ToolRegistry(DocumentBuffer("")).specs()


class TestRequest:
    def test_payload_shape(self, monkeypatch):
        post = MagicMock(return_value=_fake_response(_sse()))
        monkeypatch.setattr("ai_secretary.llm.base.requests.post", post)

        stream = _client().submit(_conversation(), _specs())
        list(stream)

        url = post.call_args.args[0]
        kwargs = post.call_args.kwargs
        assert url == "https://api.example.com/v1/chat/completions"
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["stream"] is True
        payload = kwargs["json"]
        assert payload["model"] == "gpt-test"
        assert payload["stream"] is True
        assert payload["messages"] == [{"role": "user", "content": "Edit please"}]
        assert [t["function"]["name"] for t in payload["tools"]] == ["edit", "read"]
        assert payload["tools"][0]["type"] == "function"

    def test_history_encoding(self):
        conversation = _conversation()
        conversation.append(Message(
            role=ASSISTANT, content="",
            tool_calls=[ToolCall(id="a", name="edit", arguments={"search": "x", "replace": "y"}),
                        ToolCall(id="b", name="read", arguments={})]))
        conversation.add_tool_results([
            ToolResult("a", "edit", False, "Edited successfully."),
            ToolResult("b", "read", False, "<wiki_page>\ny\n</wiki_page>"),
        ])

        messages = OpenAIClient._encode_messages(conversation)

        assistant = messages[1]
        assert assistant["role"] == "assistant"
        assert assistant["content"] is None
        assert assistant["tool_calls"][0]["id"] == "a"
        assert json.loads(assistant["tool_calls"][0]["function"]["arguments"]) == {
            "search": "x", "replace": "y"}
        assert messages[2] == {"role": "tool", "tool_call_id": "a",
                               "content": "Edited successfully."}
        assert messages[3]["tool_call_id"] == "b"
        assert len(messages) == 4


class TestStreamParsing:
    def test_text_and_fragmented_tool_calls(self, monkeypatch):
        lines = _sse(
            {"choices": [{"delta": {"content": "Let me "}}]},
            {"choices": [{"delta": {"content": "fix that."}}]},
            {"choices": [{"delta": {"tool_calls": [
                {"index": 0, "id": "call_1", "function": {"name": "edit", "arguments": ""}}]}}]},
            {"choices": [{"delta": {"tool_calls": [
                {"index": 0, "function": {"arguments": '{"search": "a",'}}]}}]},
            {"choices": [{"delta": {"tool_calls": [
                {"index": 1, "id": "call_2", "function": {"name": "read", "arguments": "{}"}}]}}]},
            {"choices": [{"delta": {"tool_calls": [
                {"index": 0, "function": {"arguments": ' "replace": "b"}'}}]}}]},
            {"choices": [{"delta": {}, "finish_reason": "tool_calls"}]},
            {"choices": [], "usage": {"prompt_tokens": 12, "completion_tokens": 7}},
        )
        monkeypatch.setattr("ai_secretary.llm.base.requests.post",
                            MagicMock(return_value=_fake_response(lines)))

        stream = _client().submit(_conversation(), _specs())
        parts = list(stream)

        assert [type(p) for p in parts] == [
            TextDelta, TextDelta, ToolCallPart, ToolCallPart, FinishPart, UsagePart]
        assert stream.text == "Let me fix that."
        calls = stream.tool_calls
        assert [c.id for c in calls] == ["call_1", "call_2"]
        assert calls[0].arguments == {"search": "a", "replace": "b"}
        assert calls[1].arguments == {}
        [message] = stream.messages
        assert message.role == ASSISTANT
        assert message.content == "Let me fix that."
        assert len(message.tool_calls) == 2

    def test_text_only_turn(self, monkeypatch):
        lines = _sse({"choices": [{"delta": {"content": "Done."}, "finish_reason": "stop"}]})
        monkeypatch.setattr("ai_secretary.llm.base.requests.post",
                            MagicMock(return_value=_fake_response(lines)))
        stream = _client().submit(_conversation(), _specs())
        list(stream)
        assert stream.tool_calls == []
        assert stream.messages[0].content == "Done."

    def test_invalid_argument_json_is_kept_raw(self, monkeypatch):
        lines = _sse(
            {"choices": [{"delta": {"tool_calls": [
                {"index": 0, "id": "c", "function": {"name": "edit", "arguments": "{oops"}}]}}]},
        )
        monkeypatch.setattr("ai_secretary.llm.base.requests.post",
                            MagicMock(return_value=_fake_response(lines)))
        stream = _client().submit(_conversation(), _specs())
        list(stream)
        assert stream.tool_calls[0].arguments == "{oops"

    def test_tool_calls_unavailable_before_exhaustion(self, monkeypatch):
        from ai_secretary.llm.base import LLMError
        monkeypatch.setattr("ai_secretary.llm.base.requests.post",
                            MagicMock(return_value=_fake_response(_sse())))
        stream = _client().submit(_conversation(), _specs())
        with pytest.raises(LLMError):
            stream.tool_calls
