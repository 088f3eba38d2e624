"""
Creatorsgarten wiki pages, read and written through the contentsgarten API.

Saves carry the revision seen at load time so the server can reject the
write if somebody else edited the page in between.
"""

import json

import requests

from .base import DocumentEditor, LoadError, SaveConflictError, SaveError
from ..cli_display import log


class WikiEditor(DocumentEditor):

    def __init__(self, page_ref: str, api_url: str, auth_token: str = "",
                 timeout: float = 60.0):
        self.page_ref = page_ref
        self.api_url = api_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self.revision: str | None = None

    @property
    def description(self) -> str:
        return f"wiki page {self.page_ref}"

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def load(self) -> str:
        query = json.dumps({
            "pageRef": self.page_ref,
            "withFile": True,
            "revalidate": True,
            "render": False,
        })
        try:
            response = requests.get(f"{self.api_url}/view",
                                    params={"input": query},
                                    headers=self._headers(),
                                    timeout=(10, self.timeout))
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise LoadError(f"Cannot load {self.page_ref}: {e}") from e

        try:
            file_info = data["result"]["data"]["file"]
            content = file_info["content"]
            revision = file_info["revision"]
        except (KeyError, TypeError) as e:
            raise LoadError(
                f"Cannot load {self.page_ref}: page has no file "
                f"(missing {e})") from e

        self.revision = revision
        log.info(f"Loaded text from {self.page_ref} with revision {revision}")
        return content

    def save(self, contents: str) -> None:
        if not self.revision:
            raise SaveError("Cannot save: no revision received")
        payload = {
            "pageRef": self.page_ref,
            "newContent": contents,
            "oldRevision": self.revision,
        }
        try:
            response = requests.post(f"{self.api_url}/save", json=payload,
                                     headers=self._headers(),
                                     timeout=(10, self.timeout))
        except requests.RequestException as e:
            raise SaveError(f"Cannot save {self.page_ref}: {e}") from e

        if response.status_code == 409 or (
                response.status_code >= 400 and "revision" in response.text.lower()):
            raise SaveConflictError(
                f"{self.page_ref} was modified since revision {self.revision}; "
                f"reload the page and try again")
        if response.status_code >= 400:
            raise SaveError(f"Cannot save {self.page_ref}: "
                            f"HTTP {response.status_code}: {response.text[:300]}")
        log.info(f"Saved {self.page_ref} (base revision {self.revision})")
