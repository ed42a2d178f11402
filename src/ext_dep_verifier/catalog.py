"""Build and persist the runtime extension catalog.

The catalog maps every extension found on the runtime classpath
(`group:artifact:version`) to its companion deployment coordinate. It is
written as a properties file so the deployment verification can run as a
separate, independently cacheable step.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable
from pathlib import Path

from ext_dep_verifier import properties
from ext_dep_verifier.exceptions import CatalogError, ConsistencyError
from ext_dep_verifier.models import ResolvedDependency
from ext_dep_verifier.scanner import has_deployment_marker, read_deployment_coordinate


logger = logging.getLogger(__name__)

CATALOG_RELATIVE_PATH = Path("quarkus") / "runtime-dependencies-catalog.properties"
FINGERPRINT_KEY = "classpath-sha256"


def _update_from_file(digest, path: Path) -> None:
    try:
        with path.open("rb") as fh:
            for chunk in iter(lambda: fh.read(65536), b""):
                digest.update(chunk)
    except OSError as exc:
        raise CatalogError(f"Unable to read resolved artifact - {path.resolve()}") from exc


def classpath_fingerprint(dependencies: Iterable[ResolvedDependency]) -> str:
    """Return a SHA-256 over every resolved coordinate, its type and its contents.

    Regular files contribute their bytes, directories their sorted relative
    paths and file contents. Entries without a local file contribute only
    their coordinate and type. Order of `dependencies` does not matter.
    """
    digest = hashlib.sha256()
    for dep in sorted(dependencies, key=lambda d: d.coordinate.compact()):
        digest.update(dep.coordinate.compact().encode("utf-8"))
        digest.update(b"\0")
        digest.update(dep.type.encode("utf-8"))
        digest.update(b"\0")
        if dep.file.is_file():
            _update_from_file(digest, dep.file)
        elif dep.file.is_dir():
            for child in sorted(p for p in dep.file.rglob("*") if p.is_file()):
                digest.update(child.relative_to(dep.file).as_posix().encode("utf-8"))
                digest.update(b"\0")
                _update_from_file(digest, child)
                digest.update(b"\0")
        digest.update(b"\0")
    return digest.hexdigest()


def build_catalog(dependencies: Iterable[ResolvedDependency]) -> dict[str, str]:
    """Scan the runtime classpath and collect extension -> deployment mappings.

    Args:
        dependencies: The resolved runtime classpath of the runtime artifact.

    Raises:
        ConsistencyError: On the first archive carrying the deployment marker.
        ArchiveError: If a resolved archive cannot be opened.
        MarkerError: If an extension marker does not name its deployment artifact.

    Returns:
        Mapping of extension coordinate to companion deployment coordinate.
    """
    deps = list(dependencies)
    logger.info("Checking `%d` runtime dependencies", len(deps))

    catalog: dict[str, str] = {}
    for dep in deps:
        if not dep.is_archive:
            continue

        coordinate = dep.coordinate.compact()
        logger.debug("Checking runtime dependency - %s", coordinate)

        if has_deployment_marker(dep.file):
            raise ConsistencyError(
                f"The extension's runtime classpath depends on a deployment artifact : `{coordinate}`",
                [coordinate],
            )

        deployment = read_deployment_coordinate(dep.file)
        if deployment is not None:
            catalog[coordinate] = deployment.compact()
    return catalog


def write_catalog(path: Path, catalog: dict[str, str], *, fingerprint: str | None = None) -> Path:
    """Persist the catalog with sorted keys so identical input yields identical bytes."""
    comments = [f"{FINGERPRINT_KEY}={fingerprint}"] if fingerprint else []
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(properties.dumps(catalog, comments=comments), encoding="latin-1")
    except OSError as exc:
        raise CatalogError(f"Error storing extension catalog - {path.resolve()}") from exc
    return path


def load_catalog(path: Path) -> dict[str, str]:
    """Load a catalog written by `write_catalog`."""
    try:
        text = path.read_text(encoding="latin-1")
    except OSError as exc:
        raise CatalogError(f"Unable to load catalog file - {path.resolve()}") from exc
    try:
        return properties.loads(text)
    except ValueError as exc:
        raise CatalogError(f"Malformed catalog file - {path.resolve()} ({exc})") from exc


def stored_fingerprint(path: Path) -> str | None:
    """Return the classpath fingerprint recorded in an existing catalog, if any."""
    if not path.is_file():
        return None
    prefix = f"#{FINGERPRINT_KEY}="
    try:
        with path.open(encoding="latin-1") as fh:
            first = fh.readline().strip()
    except OSError:
        return None
    if first.startswith(prefix):
        return first[len(prefix):]
    return None


def generate_catalog(
    dependencies: Iterable[ResolvedDependency],
    output: Path,
    *,
    force: bool = False,
) -> dict[str, str]:
    """Build the catalog for `dependencies` and write it to `output`.

    The scan is skipped when `output` already records the fingerprint of the
    same classpath, unless `force` is set.
    """
    deps = list(dependencies)
    fingerprint = classpath_fingerprint(deps)
    if not force and stored_fingerprint(output) == fingerprint:
        logger.info("Catalog %s is up-to-date", output)
        return load_catalog(output)

    # a stale catalog must not survive a failed scan
    try:
        output.unlink(missing_ok=True)
    except OSError as exc:
        raise CatalogError(f"Unable to remove stale catalog - {output.resolve()}") from exc

    catalog = build_catalog(deps)
    write_catalog(output, catalog, fingerprint=fingerprint)
    logger.info("Wrote %d extension(s) to %s", len(catalog), output)
    return catalog
