"""
Document buffer: the original and current text of the document being edited.
"""

from __future__ import annotations

import re

_TRAILING_SPACES_EOL = re.compile(r"[ ]*\r?\n")


def normalize_line_endings(text: str) -> str:
    """Drop spaces before every line break and convert CRLF to LF."""
    return _TRAILING_SPACES_EOL.sub("\n", text)


class DocumentBuffer:
    """Holds a loaded document.

    ``original_contents`` is fixed at construction.  ``contents`` starts out
    equal to it and only changes through :meth:`commit`, which the edit tool
    calls after it has validated a mutation.
    """

    def __init__(self, text: str) -> None:
        normalized = normalize_line_endings(text)
        self._original_contents = normalized
        self._contents = normalized

    @property
    def original_contents(self) -> str:
        return self._original_contents

    @property
    def contents(self) -> str:
        return self._contents

    @property
    def changed(self) -> bool:
        return self._contents != self._original_contents

    def commit(self, new_contents: str) -> None:
        self._contents = new_contents

    def __repr__(self) -> str:
        return (f"DocumentBuffer(original={len(self._original_contents)} chars, "
                f"current={len(self._contents)} chars, changed={self.changed})")
