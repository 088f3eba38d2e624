"""
Diff display — compute and show colored unified diffs of the edited document.
"""

from __future__ import annotations

import difflib

from .cli_display import C_BOLD, C_CYAN, C_GREEN, C_RED, C_RESET, info


def compute_diff(original: str, modified: str, context: int = 5) -> str | None:
    """Return the unified diff body (without file headers), or None if unchanged."""
    if original == modified:
        return None

    diff = difflib.unified_diff(
        original.splitlines(keepends=True),
        modified.splitlines(keepends=True),
        fromfile="Original",
        tofile="Modified",
        n=context,
        lineterm="",
    )
    # Skip the ---/+++ header lines
    lines = [line.rstrip("\r\n") for line in list(diff)[2:]]
    diff_text = "\n".join(lines)
    return diff_text if diff_text.strip() else None


def count_changes(diff_text: str) -> tuple[int, int]:
    """Return ``(additions, deletions)`` for a header-less unified diff."""
    lines = diff_text.splitlines()
    added = sum(1 for line in lines if line.startswith("+"))
    removed = sum(1 for line in lines if line.startswith("-"))
    return added, removed


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    """
    colored: list[str] = []
    for line in diff_text.splitlines():
        if line.startswith("+++") or line.startswith("---"):
            colored.append(f"{C_BOLD}{line}{C_RESET}")
        elif line.startswith("@@"):
            colored.append(f"{C_CYAN}{line}{C_RESET}")
        elif line.startswith("+"):
            colored.append(f"{C_GREEN}{line}{C_RESET}")
        elif line.startswith("-"):
            colored.append(f"{C_RED}{line}{C_RESET}")
        else:
            colored.append(line)
    return "\n".join(colored)


def show_diff(original: str, modified: str, context: int = 5) -> str | None:
    """Print the colored diff and a change summary. Returns the plain diff."""
    diff_text = compute_diff(original, modified, context)
    if diff_text is None:
        info("No changes made to the document.")
        return None

    print(format_colored_diff(diff_text))
    added, removed = count_changes(diff_text)
    info(f"Changes: {added} additions, {removed} deletions")
    return diff_text
