"""
ai_secretary: edit documents with natural-language requests.

Public API for library usage::

    from ai_secretary import DocumentBuffer, EditSession
    from ai_secretary.config import Config
    from ai_secretary.llm import create_transport

    buffer = DocumentBuffer(text)
    session = EditSession(buffer, "Fix the typos", create_transport(Config.load()))
    session.run()
    print(buffer.contents)
"""

from .editing.buffer import DocumentBuffer
from .agent import AgentState, EditorAgent
from .session import EditSession

__all__ = ["DocumentBuffer", "AgentState", "EditorAgent", "EditSession"]
