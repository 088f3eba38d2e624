"""Document buffer and the edit/read tools exposed to the model."""

from .buffer import DocumentBuffer, normalize_line_endings
from .tools import (
    ToolKind, ToolSpec, ToolRegistry, EditArgs,
    ToolError, NoMatchError, AmbiguousMatchError, InvalidArgumentsError,
    UnknownToolError, InternalToolError, apply_edit, read_document,
)

__all__ = [
    "DocumentBuffer", "normalize_line_endings",
    "ToolKind", "ToolSpec", "ToolRegistry", "EditArgs",
    "ToolError", "NoMatchError", "AmbiguousMatchError", "InvalidArgumentsError",
    "UnknownToolError", "InternalToolError", "apply_edit", "read_document",
]
