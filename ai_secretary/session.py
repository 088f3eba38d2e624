"""
Edit session: one human request, one buffer, one agent conversation.
"""

from __future__ import annotations

from datetime import datetime

from .agent import EditorAgent
from .editing.buffer import DocumentBuffer
from .editing.tools import PAGE_TAG, ToolRegistry

_SYSTEM_INSTRUCTIONS = """\
You are an AI secretary.
You will be given a wiki page in Markdown format inside the <{tag}></{tag}> tag.
Your task is to edit the page according to the user's request. Use the "edit" tool to do so.
However, if it is clear that the user is merely asking for information, you don't need to edit the page - just answer the question.
Keep using the "edit" tool until the page is edited according to the user's request, then reply without calling any tool to hand control back to the user.
You don't have to write exactly the same text as the user (unless specifically requested), but you should keep the meaning and intent of the user's request.
You can use multiple "edit" tool calls in parallel.
Before editing the page, plan and think what you are going to do, then let the user know before using the "edit" tool.
You can check if you made the correct edits by using the "read" tool after making the edits.
Before ending the task and yielding back to the user, use the "read" tool once more to check if the page is edited correctly.
To ensure accurate edits, carefully analyze the user's request to understand the precise text to be changed and its location.
When in doubt, feel free to ask the user for clarification.
When using the 'edit' tool:
- Ensure the 'search' parameter is an exact match for the text to be replaced, including whitespace and indentation.
- Verify the 'replace' parameter accurately reflects the desired new text and formatting.
- Consider using the 'read' tool after each individual edit in a sequence to verify the change before proceeding."""


class EditSession:
    """Ties a :class:`DocumentBuffer` to an :class:`EditorAgent`.

    The agent is created by :meth:`run`; follow-up instructions go through
    :meth:`feedback` and continue the same conversation.
    """

    def __init__(self, buffer: DocumentBuffer, request: str, transport,
                 display=None):
        self.buffer = buffer
        self.request = request
        self.transport = transport
        self.display = display
        self.agent: EditorAgent | None = None

    def build_prompt(self, now: datetime | None = None) -> str:
        now = now or datetime.now().astimezone()
        prompt = (
            f"<system_instructions>\n"
            f"{_SYSTEM_INSTRUCTIONS.format(tag=PAGE_TAG)}\n"
            f"</system_instructions>\n\n"
            f"<context>\n"
            f"Current date: {now.strftime('%a %b %d %Y %H:%M:%S %Z')}\n"
            f"</context>\n\n"
            f"<{PAGE_TAG}>\n"
            f"{self.buffer.contents.strip()}\n"
            f"</{PAGE_TAG}>\n\n"
            f"{self.request}\n"
        )
        return prompt.strip()

    def run(self) -> int:
        self.agent = EditorAgent(self.build_prompt(), ToolRegistry(self.buffer),
                                 self.transport, display=self.display)
        return self.agent.run()

    def feedback(self, text: str) -> int:
        if self.agent is None:
            raise RuntimeError("Session has not been started; call run() first.")
        return self.agent.feedback(text)
