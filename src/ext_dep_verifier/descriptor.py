"""Adjust generated Maven POM descriptors using lxml."""

from __future__ import annotations

import logging
from pathlib import Path

from lxml import etree

from ext_dep_verifier.exceptions import DocumentParseError, DocumentWriteError
from ext_dep_verifier.fsutil import preserved_mtime
from ext_dep_verifier.models import Coordinate


logger = logging.getLogger(__name__)

INDENT = "    "


def _text_first(node: etree._Element, xpath_expr: str) -> str | None:
    """Get text of the first matching element using namespace-agnostic XPath.

    Args:
        node: Root element to query under.
        xpath_expr: XPath expression (should use local-name()).

    Returns:
        Text content if found and non-empty, otherwise None.
    """
    found = node.xpath(xpath_expr)
    if not found:
        return None
    first = found[0]
    if isinstance(first, etree._Element):
        text = (first.text or "").strip()
        return text or None
    return None


def _parse_xml(path: Path) -> etree._ElementTree:
    """Parse an XML file, dropping ignorable whitespace so it can be re-indented.

    Raises:
        DocumentParseError: If the file is missing or XML cannot be parsed.
    """
    if not path.exists():
        raise DocumentParseError(f"Descriptor not found: {path.resolve()}")
    try:
        parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            recover=False,
            remove_blank_text=True,
        )
        return etree.parse(str(path), parser=parser)
    except (OSError, etree.XMLSyntaxError) as exc:
        raise DocumentParseError(f"Unable to parse XML - {path.resolve()}") from exc


def _qualified(root: etree._Element, local_name: str) -> str:
    """Return `local_name` in the namespace of `root`, if it has one."""
    namespace = etree.QName(root).namespace
    return f"{{{namespace}}}{local_name}" if namespace else local_name


def locate_dependencies(root: etree._Element) -> etree._Element:
    """Return the `dependencies` element directly under root, creating it if absent."""
    found = root.xpath("./*[local-name()='dependencies']")
    if found:
        return found[0]
    return etree.SubElement(root, _qualified(root, "dependencies"))


def append_dependency(root: etree._Element, coordinate: Coordinate) -> etree._Element:
    """Append a `dependency` entry with ordered groupId/artifactId/version children."""
    dependencies = locate_dependencies(root)
    dependency = etree.SubElement(dependencies, _qualified(root, "dependency"))
    for tag, value in (
        ("groupId", coordinate.group),
        ("artifactId", coordinate.artifact),
        ("version", coordinate.version),
    ):
        child = etree.SubElement(dependency, _qualified(root, tag))
        child.text = value or ""
    return dependency


def read_dependencies(path: str | Path) -> list[Coordinate]:
    """Return the direct dependencies declared by a descriptor.

    Entries without a groupId or artifactId are skipped.
    """
    root = _parse_xml(Path(path)).getroot()
    deps: list[Coordinate] = []
    for node in root.xpath("./*[local-name()='dependencies']/*[local-name()='dependency']"):
        group = _text_first(node, "./*[local-name()='groupId']")
        artifact = _text_first(node, "./*[local-name()='artifactId']")
        version = _text_first(node, "./*[local-name()='version']")
        if group is None or artifact is None:
            continue
        deps.append(Coordinate(group=group, artifact=artifact, version=version))
    return deps


def inject_dependency(path: str | Path, coordinate: Coordinate) -> None:
    """Add `coordinate` as a dependency of the descriptor at `path`.

    The file is rewritten with 4-space indentation and keeps its previous
    modification time. Applying this twice adds the dependency twice.

    Raises:
        DocumentParseError: If the descriptor cannot be parsed.
        DocumentWriteError: If the adjusted descriptor cannot be written.
    """
    pom_path = Path(path)
    tree = _parse_xml(pom_path)
    append_dependency(tree.getroot(), coordinate)
    etree.indent(tree, space=INDENT)

    with preserved_mtime(pom_path):
        try:
            tree.write(str(pom_path), xml_declaration=True, encoding="UTF-8", pretty_print=True)
        except OSError as exc:
            raise DocumentWriteError(f"Unable to write XML to file - {pom_path.resolve()}") from exc
    logger.debug("Added dependency %s to %s", coordinate, pom_path)
