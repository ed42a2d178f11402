"""Probe archives for the well-known extension marker entries."""

from __future__ import annotations

import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ext_dep_verifier import properties
from ext_dep_verifier.exceptions import ArchiveError, DocumentWriteError, MarkerError
from ext_dep_verifier.models import Coordinate


DEPLOYMENT_MARKER = "META-INF/quarkus-build-steps.list"
EXTENSION_MARKER = "META-INF/quarkus-extension.properties"
DEPLOYMENT_ARTIFACT_KEY = "deployment-artifact"


@contextmanager
def open_archive(path: Path) -> Iterator[zipfile.ZipFile]:
    """Open `path` as a zip package for the duration of the block.

    Raises:
        ArchiveError: If the file is missing or is not a valid archive.
    """
    try:
        archive = zipfile.ZipFile(path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise ArchiveError(f"Unable to treat file as an archive - {Path(path).resolve()}") from exc
    with archive:
        yield archive


def _has(archive: zipfile.ZipFile, marker: str) -> bool:
    try:
        archive.getinfo(marker)
    except KeyError:
        return False
    return True


def has_entry(path: Path, marker: str) -> bool:
    """Return whether the archive at `path` has an entry named `marker`."""
    with open_archive(path) as archive:
        return _has(archive, marker)


def has_deployment_marker(path: Path) -> bool:
    return has_entry(path, DEPLOYMENT_MARKER)


def has_extension_marker(path: Path) -> bool:
    return has_entry(path, EXTENSION_MARKER)


def read_deployment_coordinate(path: Path) -> Coordinate | None:
    """Read the companion deployment coordinate from the extension marker.

    Args:
        path: Archive to inspect.

    Raises:
        ArchiveError: If the archive cannot be opened or the entry cannot be read.
        MarkerError: If the marker does not declare a usable coordinate.

    Returns:
        The unescaped coordinate, or None when the archive is not an extension.
    """
    with open_archive(path) as archive:
        if not _has(archive, EXTENSION_MARKER):
            return None
        try:
            text = archive.read(EXTENSION_MARKER).decode("latin-1")
        except (OSError, zipfile.BadZipFile) as exc:
            raise ArchiveError(
                f"Error reading {EXTENSION_MARKER} from {Path(path).resolve()}"
            ) from exc

    try:
        value = properties.loads(text).get(DEPLOYMENT_ARTIFACT_KEY)
    except ValueError as exc:
        raise MarkerError(
            f"{EXTENSION_MARKER} in {Path(path).resolve()} is malformed: {exc}"
        ) from exc
    if not value:
        raise MarkerError(
            f"{EXTENSION_MARKER} in {Path(path).resolve()} does not declare `{DEPLOYMENT_ARTIFACT_KEY}`"
        )
    try:
        return Coordinate.parse(value)
    except ValueError as exc:
        raise MarkerError(
            f"{EXTENSION_MARKER} in {Path(path).resolve()} declares an invalid coordinate: {value!r}"
        ) from exc


def write_extension_properties(path: Path, deployment: Coordinate) -> Path:
    """Write the extension marker content naming `deployment` as the companion artifact."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            properties.dumps({DEPLOYMENT_ARTIFACT_KEY: deployment.compact()}),
            encoding="latin-1",
        )
    except OSError as exc:
        raise DocumentWriteError(f"Unable to generate {EXTENSION_MARKER} - {path.resolve()}") from exc
    return path
