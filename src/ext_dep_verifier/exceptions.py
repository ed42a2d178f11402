"""Custom exceptions for ext-dep-verifier."""

from __future__ import annotations

from collections.abc import Iterable


class ExtDepError(Exception):
    """Base exception for ext-dep-verifier."""


class ArchiveError(ExtDepError):
    """Raised when a file cannot be opened as an archive."""


class ClasspathError(ExtDepError):
    """Raised when a resolved classpath description cannot be loaded."""


class CatalogError(ExtDepError):
    """Raised when the extension catalog cannot be read or written."""


class DocumentParseError(ExtDepError):
    """Raised when a descriptor or module metadata document cannot be parsed."""


class DocumentWriteError(ExtDepError):
    """Raised when an adjusted document cannot be written back."""


class MarkerError(ExtDepError):
    """Raised when a marker entry is present but its content is unusable."""


class ConsistencyError(ExtDepError):
    """Raised when a classpath violates the extension packaging rules.

    `coordinates` holds every offending coordinate so a single report can
    cover all of them.
    """

    def __init__(self, message: str, coordinates: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.coordinates: tuple[str, ...] = tuple(coordinates)
