import os

from .base import DocumentEditor, LoadError, SaveError
from ..cli_display import log


class FilesystemEditor(DocumentEditor):

    def __init__(self, path: str):
        self.path = path

    @property
    def description(self) -> str:
        return self.path

    def load(self) -> str:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(f"Cannot read {self.path}: {e}") from e
        log.info(f"Loaded text from {self.path}")
        return text

    def save(self, contents: str) -> None:
        tmp = self.path + ".tmp"
        try:
            with open(tmp, "w", encoding="utf-8", newline="") as f:
                f.write(contents)
            os.replace(tmp, self.path)
        except OSError as e:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise SaveError(f"Cannot write {self.path}: {e}") from e
        log.info(f"Saved {len(contents)} chars to {self.path}")
