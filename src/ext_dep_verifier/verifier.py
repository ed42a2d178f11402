"""Verify the deployment classpath against the runtime extension catalog."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from ext_dep_verifier.exceptions import ConsistencyError
from ext_dep_verifier.fsutil import touch
from ext_dep_verifier.models import Coordinate, ResolvedDependency
from ext_dep_verifier.scanner import has_extension_marker


logger = logging.getLogger(__name__)

VERIFICATION_OUTPUT_RELATIVE_PATH = Path("tmp") / "verifyQuarkusDependencies.txt"


def extensions_on_classpath(dependencies: Iterable[ResolvedDependency]) -> set[str]:
    """Return the coordinates of every extension archive in `dependencies`."""
    found: set[str] = set()
    for dep in dependencies:
        if not dep.is_archive:
            continue
        if has_extension_marker(dep.file):
            logger.debug("Extension on deployment classpath - %s", dep.coordinate)
            found.add(dep.coordinate.compact())
    return found


def missing_runtime_extensions(
    catalog: Mapping[str, str],
    dependencies: Iterable[ResolvedDependency],
) -> list[str]:
    """Return extension coordinates on the deployment classpath that are not catalog keys."""
    remaining = extensions_on_classpath(dependencies)
    remaining.difference_update(catalog.keys())
    return sorted(remaining)


def _describe(coordinate: str, catalog: Mapping[str, str]) -> str:
    try:
        group_artifact = Coordinate.parse(coordinate).group_artifact()
    except ValueError:
        return coordinate
    others = sorted(
        key for key in catalog if key.startswith(group_artifact + ":") and key != coordinate
    )
    if others:
        return f"{coordinate} (runtime classpath has {', '.join(others)})"
    return coordinate


def verify_deployment(
    catalog: Mapping[str, str],
    dependencies: Iterable[ResolvedDependency],
) -> None:
    """Fail if the deployment classpath uses extensions the runtime artifact does not depend on.

    Every violation is reported in one error so they can be fixed together.

    Raises:
        ConsistencyError: Listing every offending coordinate.
    """
    missing = missing_runtime_extensions(catalog, dependencies)
    if not missing:
        return
    listed = ", ".join(_describe(c, catalog) for c in missing)
    raise ConsistencyError(
        "The deployment classpath defined dependencies on the following extension "
        f"runtime artifacts which are not dependencies of the runtime artifact : [{listed}]",
        missing,
    )


def run_verification(
    catalog: Mapping[str, str],
    dependencies: Iterable[ResolvedDependency],
    output: Path | None = None,
) -> None:
    """Verify and, on success, touch the verification output file."""
    verify_deployment(catalog, dependencies)
    if output is not None:
        touch(output)
