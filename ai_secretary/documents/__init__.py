"""
Document sources: resolve a document reference to something that can load
and save it.

Supported references:

* file paths: ``/abs/path.md``, ``./rel.md``, ``../rel.md``, ``C:\\docs\\a.md``
* Creatorsgarten wiki: ``Namespace/Page``,
  ``https://creatorsgarten.org/wiki/<ref>``,
  ``https://creatorsgarten.org/event/<id>`` (page ``Events/<id>``)
* GitHub issues: ``https://github.com/<owner>/<repo>/issues/<number>``
"""

from __future__ import annotations

import re

from .base import (
    DocumentEditor, DocumentError, LoadError, SaveError, SaveConflictError,
    UnsupportedReferenceError,
)
from .filesystem import FilesystemEditor
from .wiki import WikiEditor
from .github_issue import GithubIssueEditor
from ..config import Config

_WINDOWS_PATH_RE = re.compile(r"^[A-Za-z]:\\")
_PAGE_REF_RE = re.compile(r"^[\w-]+/[\w-]+$")
_WIKI_URL_RE = re.compile(r"^https://creatorsgarten\.org/wiki/(.+)$")
_EVENT_URL_RE = re.compile(r"^https://creatorsgarten\.org/event/(.+)$")
_GITHUB_ISSUE_RE = re.compile(r"^https://github\.com/[\w.-]+/[\w.-]+/issues/\d+$")


def _is_file_path(ref: str) -> bool:
    return (ref.startswith(("/", "./", "../"))
            or bool(_WINDOWS_PATH_RE.match(ref)))


def wiki_page_ref(ref: str) -> str | None:
    """Return the wiki page reference named by *ref*, or ``None``."""
    if _PAGE_REF_RE.match(ref):
        return ref
    match = _WIKI_URL_RE.match(ref)
    if match:
        return match.group(1)
    match = _EVENT_URL_RE.match(ref)
    if match:
        return f"Events/{match.group(1)}"
    return None


def get_document_editor(ref: str, cfg: Config | None = None) -> DocumentEditor:
    """Pick the editor for *ref*.

    Raises :class:`UnsupportedReferenceError` when *ref* matches no source.
    """
    ref = (ref or "").strip()
    if not ref:
        raise UnsupportedReferenceError("No document reference given.")

    if _is_file_path(ref):
        return FilesystemEditor(ref)

    page_ref = wiki_page_ref(ref)
    if page_ref:
        cfg = cfg or Config.load()
        return WikiEditor(page_ref, api_url=cfg.WIKI_API_URL,
                          auth_token=cfg.WIKIGARTEN_AUTH)

    if _GITHUB_ISSUE_RE.match(ref):
        return GithubIssueEditor(ref)

    raise UnsupportedReferenceError(
        f"Unsupported page reference: {ref}. Please provide a file path, "
        f"a Creatorsgarten wiki page or URL, or a GitHub issue URL.")


__all__ = [
    "DocumentEditor", "DocumentError", "LoadError", "SaveError",
    "SaveConflictError", "UnsupportedReferenceError",
    "FilesystemEditor", "WikiEditor", "GithubIssueEditor",
    "get_document_editor", "wiki_page_ref",
]
