from abc import ABC, abstractmethod


class DocumentError(Exception):
    """Base class for document loading and saving failures."""


class LoadError(DocumentError):
    """The document could not be fetched."""


class SaveError(DocumentError):
    """The document could not be persisted."""


class SaveConflictError(SaveError):
    """The stored document changed since it was loaded."""


class UnsupportedReferenceError(DocumentError):
    """The document reference does not name a supported source."""


class DocumentEditor(ABC):
    """A place a document can be loaded from and saved back to."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable name of the document, for status messages."""

    @abstractmethod
    def load(self) -> str:
        """Fetch the current document text. Raises :class:`LoadError`."""

    @abstractmethod
    def save(self, contents: str) -> None:
        """Persist *contents*. Raises :class:`SaveError`."""
