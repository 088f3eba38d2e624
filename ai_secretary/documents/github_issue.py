"""
GitHub issue bodies, edited through the ``gh`` command-line client.
"""

import subprocess

from .base import DocumentEditor, LoadError, SaveError
from ..cli_display import log


def _run_gh(args: list[str]) -> tuple[bool, str]:
    """Run a gh command and return ``(success, output)``."""
    try:
        result = subprocess.run(
            ["gh", *args],
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=False,
        )
    except OSError as e:
        return False, str(e)
    if result.returncode != 0:
        return False, (result.stderr or result.stdout).strip()
    return True, result.stdout


class GithubIssueEditor(DocumentEditor):

    def __init__(self, issue_url: str):
        self.issue_url = issue_url

    @property
    def description(self) -> str:
        return f"GitHub issue {self.issue_url}"

    def load(self) -> str:
        ok, output = _run_gh(["issue", "view", self.issue_url,
                              "--json", "body", "--template", "{{ .body }}"])
        if not ok:
            raise LoadError(f"gh issue view failed: {output}")
        log.info(f"Loaded text from GitHub issue {self.issue_url}")
        return output

    def save(self, contents: str) -> None:
        ok, output = _run_gh(["issue", "edit", self.issue_url, "--body", contents])
        if not ok:
            raise SaveError(f"gh issue edit failed: {output}")
        log.info(f"Edited GitHub issue {self.issue_url}")
