"""
Document tools: the operations the model may call on the buffer.

Two tools are exposed: ``edit`` (occurrence-exact search/replace) and
``read`` (return the current document).  The model cannot be trusted with
offsets, but it can commit to how many times the search text occurs; any
mismatch is reported back as a tool error so the model can retry with more
context.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

from ..conversation import ToolCall, ToolResult
from .buffer import DocumentBuffer

logger = logging.getLogger(__name__)

PAGE_TAG = "wiki_page"


# ── Errors ──

class ToolError(Exception):
    """A recoverable tool failure, reported to the model as an error result."""


class NoMatchError(ToolError):
    def __init__(self) -> None:
        super().__init__(
            "Error: No match found for replacement. "
            "Please check your text and try again.")


class AmbiguousMatchError(ToolError):
    def __init__(self, matches: int, expected: int | float) -> None:
        self.matches = matches
        self.expected = expected
        super().__init__(
            f"Error: The document contains {matches} occurrences of the "
            f"search string. Please provide more context to make a unique match.")


class InvalidArgumentsError(ToolError):
    def __init__(self, tool_name: str, reason: str) -> None:
        super().__init__(f"Error: Invalid arguments for '{tool_name}': {reason}")


class UnknownToolError(Exception):
    """The model called a tool that is not registered."""


class InternalToolError(Exception):
    """Wraps an unexpected failure raised while running a tool."""

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        self.tool_name = tool_name
        self.cause = cause
        super().__init__(f"Internal error: {cause}")


# ── Declarations ──

class ToolKind(enum.Enum):
    EDIT = "edit"
    READ = "read"


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: dict


EDIT_SPEC = ToolSpec(
    name=ToolKind.EDIT.value,
    description="Replaces text in the page.",
    parameters={
        "type": "object",
        "properties": {
            "search": {
                "type": "string",
                "description": (
                    "The text to search for. This must be an exact match "
                    "(must match exactly, including whitespace and "
                    "indentation) with the exact number of occurrences."),
            },
            "replace": {
                "type": "string",
                "description": "The text to replace with.",
            },
            "occurrences": {
                "type": "integer",
                "description": (
                    "The number of occurrences to replace. The document must "
                    "contain exactly this number of occurrences. Please "
                    "provide more context to make a unique match."),
                "default": 1,
            },
        },
        "required": ["search", "replace"],
    },
)

READ_SPEC = ToolSpec(
    name=ToolKind.READ.value,
    description=(
        "Read the wiki page. Returns the content of the page. You don't need "
        f"to use this tool to read the page, as you already have the content "
        f"in the <{PAGE_TAG}> tag. It can be useful for reading the whole "
        "page after editing it."),
    parameters={"type": "object", "properties": {}},
)

_SPECS = {
    ToolKind.EDIT: EDIT_SPEC,
    ToolKind.READ: READ_SPEC,
}


@dataclass(frozen=True)
class EditArgs:
    search: str
    replace: str
    occurrences: int | float = 1

    @classmethod
    def parse(cls, raw: Any) -> "EditArgs":
        name = ToolKind.EDIT.value
        if not isinstance(raw, dict):
            raise InvalidArgumentsError(name, "expected a JSON object")

        search = raw.get("search")
        if not isinstance(search, str) or not search:
            raise InvalidArgumentsError(name, "'search' must be a non-empty string")

        replace = raw.get("replace")
        if not isinstance(replace, str):
            raise InvalidArgumentsError(name, "'replace' must be a string")

        occurrences = raw.get("occurrences")
        if occurrences is None:
            occurrences = 1
        elif (isinstance(occurrences, bool)
              or not isinstance(occurrences, (int, float))):
            raise InvalidArgumentsError(name, "'occurrences' must be a number")
        elif isinstance(occurrences, float) and occurrences.is_integer():
            occurrences = int(occurrences)

        return cls(search=search, replace=replace, occurrences=occurrences)


# ── Operations ──

def apply_edit(buffer: DocumentBuffer, args: EditArgs) -> str:
    """Replace every occurrence of ``args.search`` if the count matches.

    Raises :class:`NoMatchError` or :class:`AmbiguousMatchError` and leaves
    the buffer untouched when the number of occurrences differs from
    ``args.occurrences``.
    """
    pieces = buffer.contents.split(args.search)
    matches = len(pieces) - 1
    if matches == 0:
        raise NoMatchError()
    if matches != args.occurrences:
        raise AmbiguousMatchError(matches, args.occurrences)
    buffer.commit(args.replace.join(pieces))
    logger.debug("[edit] replaced %d occurrence(s)", matches)
    return "Edited successfully."


def read_document(buffer: DocumentBuffer) -> str:
    return f"<{PAGE_TAG}>\n{buffer.contents}\n</{PAGE_TAG}>"


class ToolRegistry:
    """The tools available to the model, bound to one buffer."""

    def __init__(self, buffer: DocumentBuffer) -> None:
        self.buffer = buffer

    def specs(self) -> list[ToolSpec]:
        return [_SPECS[kind] for kind in ToolKind]

    @staticmethod
    def resolve(name: str) -> ToolKind:
        try:
            return ToolKind(name)
        except ValueError:
            raise UnknownToolError(f"Unknown tool: {name!r}") from None

    def dispatch(self, call: ToolCall) -> ToolResult:
        """Run *call* against the buffer.

        Tool errors become error results.  :class:`UnknownToolError` and any
        unexpected exception propagate to the caller.
        """
        kind = self.resolve(call.name)
        try:
            if kind is ToolKind.EDIT:
                output = apply_edit(self.buffer, EditArgs.parse(call.arguments))
            elif kind is ToolKind.READ:
                output = read_document(self.buffer)
            else:
                raise UnknownToolError(f"No handler for tool: {kind.value!r}")
        except ToolError as e:
            logger.info("[%s] %s", kind.value, e)
            return ToolResult(call_id=call.id, tool_name=call.name,
                              is_error=True, result=str(e))
        return ToolResult(call_id=call.id, tool_name=call.name,
                          is_error=False, result=output)
