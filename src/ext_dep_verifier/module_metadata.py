"""Adjust generated Gradle module metadata (`.module`) documents.

Variants of the secondary publications are generated with the publication
name as a prefix (`deploymentApiElements`); consumers expect the canonical
names (`apiElements`). Each variant also gets an explicit dependency on its
companion module.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ext_dep_verifier.exceptions import DocumentParseError, DocumentWriteError
from ext_dep_verifier.fsutil import preserved_mtime
from ext_dep_verifier.models import Coordinate


logger = logging.getLogger(__name__)

# checked in order; first matching suffix wins
CANONICAL_VARIANT_NAMES: tuple[tuple[str, str], ...] = (
    ("ApiElements", "apiElements"),
    ("RuntimeElements", "runtimeElements"),
    ("JavadocElements", "javadocElements"),
    ("SourcesElements", "sourcesElements"),
)

VariantAdjuster = Callable[[dict[str, Any]], None]


def canonical_variant_name(publication_name: str, variant_name: str) -> str:
    """Map a publication-prefixed variant name to its canonical form.

    Examples:
        deploymentApiElements -> apiElements
        deploymentFooBar      -> fooBar
    """
    for suffix, canonical in CANONICAL_VARIANT_NAMES:
        if variant_name.endswith(suffix):
            return canonical

    rest = variant_name
    if publication_name and rest.startswith(publication_name) and len(rest) > len(publication_name):
        rest = rest[len(publication_name):]
    return rest[:1].lower() + rest[1:]


def rename_variant(publication_name: str) -> VariantAdjuster:
    def _adjust(variant: dict[str, Any]) -> None:
        name = variant.get("name")
        if isinstance(name, str):
            variant["name"] = canonical_variant_name(publication_name, name)

    return _adjust


def add_variant_dependency(coordinate: Coordinate) -> VariantAdjuster:
    def _adjust(variant: dict[str, Any]) -> None:
        dependencies = variant.get("dependencies")
        if not isinstance(dependencies, list):
            dependencies = []
        variant["dependencies"] = [
            *dependencies,
            {
                "group": coordinate.group,
                "module": coordinate.artifact,
                "version": {"requires": coordinate.version or ""},
            },
        ]

    return _adjust


def adjust_document(document: dict[str, Any], adjusters: list[VariantAdjuster]) -> dict[str, Any] | None:
    """Return an adjusted copy of `document`, or None when it has no variants.

    The input is never mutated; fields the adjusters do not touch are carried
    over unchanged.
    """
    variants = document.get("variants")
    if not isinstance(variants, list):
        return None

    adjusted = copy.deepcopy(document)
    new_variants: list[Any] = []
    for variant in adjusted["variants"]:
        if isinstance(variant, dict):
            for adjuster in adjusters:
                adjuster(variant)
        new_variants.append(variant)
    adjusted["variants"] = new_variants
    return adjusted


def _load(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as fh:
            document = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise DocumentParseError(f"Could not read module metadata file - {path.resolve()}") from exc
    if not isinstance(document, dict):
        raise DocumentParseError(f"Module metadata is not a JSON object - {path.resolve()}")
    return document


def adjust_module_file(path: str | Path, adjusters: list[VariantAdjuster]) -> bool:
    """Apply `adjusters` to every variant of the module file at `path`.

    Returns:
        True if the file was rewritten, False if it had no variants.
    """
    module_path = Path(path)
    document = _load(module_path)
    adjusted = adjust_document(document, adjusters)
    if adjusted is None:
        logger.debug("No variants in %s; leaving it untouched", module_path)
        return False

    with preserved_mtime(module_path):
        try:
            with module_path.open("w", encoding="utf-8") as fh:
                json.dump(adjusted, fh, indent=2, ensure_ascii=False)
                fh.write("\n")
        except OSError as exc:
            raise DocumentWriteError(
                f"Could not re-write module metadata file - {module_path.resolve()}"
            ) from exc
    return True
