"""Load resolved classpaths produced by the dependency resolver.

Two sources are supported:

    - a JSON classpath manifest describing the resolved graph
      (`root` plus `artifacts[{coordinate, file, dependencies}]`), closed
      transitively from the root with networkx;
    - a directory of archives, each identified by the
      `META-INF/maven/<group>/<artifact>/pom.properties` entry the archive
      builder embeds.

A -> B in the graph means A depends on B, as in a Maven dependency graph.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import networkx as nx
from pydantic import BaseModel, Field, ValidationError

from ext_dep_verifier import properties
from ext_dep_verifier.exceptions import ClasspathError
from ext_dep_verifier.models import Coordinate, ResolvedDependency
from ext_dep_verifier.scanner import open_archive


logger = logging.getLogger(__name__)

_POM_PROPERTIES_RE = re.compile(r"^META-INF/maven/[^/]+/[^/]+/pom\.properties$")


class ClasspathEntry(BaseModel):
    """One resolved artifact in a classpath manifest."""

    coordinate: str = Field(..., min_length=1)
    file: Path | None = None
    type: str = ""
    dependencies: list[str] = Field(default_factory=list)


class ClasspathManifest(BaseModel):
    """A resolved dependency graph as written by the resolver."""

    root: str | None = None
    artifacts: list[ClasspathEntry] = Field(default_factory=list)


@dataclass
class ResolvedClasspath:
    """A resolved classpath: the dependency graph plus the artifacts reachable from its root."""

    graph: nx.DiGraph
    root: str | None = None
    dependencies: list[ResolvedDependency] = field(default_factory=list)

    def path_to(self, coordinate: str) -> list[str]:
        """Return the dependency chain from the root to `coordinate`.

        Returns:
            Node ids from root to target, or an empty list if there is no root
            or the target is unreachable.
        """
        if not self.root or coordinate not in self.graph or self.root not in self.graph:
            return []
        try:
            return [str(n) for n in nx.shortest_path(self.graph, self.root, coordinate)]
        except nx.NetworkXNoPath:
            return []

    def group_artifacts(self) -> dict[str, list[str]]:
        """Map `group:artifact` to every resolved version on this classpath."""
        out: dict[str, list[str]] = {}
        for dep in self.dependencies:
            out.setdefault(dep.coordinate.group_artifact(), []).append(dep.coordinate.compact())
        return out


def _coordinate(value: str) -> Coordinate:
    try:
        return Coordinate.parse(value)
    except ValueError as exc:
        raise ClasspathError(str(exc)) from exc


def build_graph(manifest: ClasspathManifest, base_dir: Path) -> nx.DiGraph:
    """Build the dependency graph described by a manifest.

    Relative `file` entries are resolved against `base_dir`. Every edge target
    must itself be listed as an artifact.
    """
    g = nx.DiGraph()
    for entry in manifest.artifacts:
        node = _coordinate(entry.coordinate).compact()
        if entry.file is None:
            g.add_node(node)
            continue
        file = entry.file if entry.file.is_absolute() else base_dir / entry.file
        g.add_node(node, file=file, type=entry.type)

    if manifest.root:
        root = _coordinate(manifest.root).compact()
        if not g.has_node(root):
            g.add_node(root)

    for entry in manifest.artifacts:
        a = _coordinate(entry.coordinate).compact()
        for dep in entry.dependencies:
            b = _coordinate(dep).compact()
            if not g.has_node(b) or "file" not in g.nodes[b]:
                raise ClasspathError(f"`{a}` depends on `{b}`, which is not a resolved artifact")
            g.add_edge(a, b)
    return g


def _dependencies(g: nx.DiGraph, nodes: Iterable[str]) -> list[ResolvedDependency]:
    deps: list[ResolvedDependency] = []
    for node in sorted(nodes):
        data = g.nodes[node]
        if "file" not in data:
            continue
        deps.append(
            ResolvedDependency(
                coordinate=Coordinate.parse(node),
                file=data["file"],
                type=data.get("type") or "",
            )
        )
    return deps


def resolve(g: nx.DiGraph, root: str | None) -> list[ResolvedDependency]:
    """Return the artifacts reachable from `root`, or every artifact when there is no root.

    The root itself is the project being verified and is never part of its own classpath.
    """
    if root is None:
        return _dependencies(g, g.nodes)
    if not g.has_node(root):
        raise ClasspathError(f"Classpath root `{root}` is not part of the graph")
    return _dependencies(g, nx.descendants(g, root))


def load_manifest(path: Path) -> ResolvedClasspath:
    """Load a JSON classpath manifest and resolve it from its root.

    Raises:
        ClasspathError: If the file cannot be read or does not describe a valid graph.
    """
    try:
        manifest = ClasspathManifest.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        raise ClasspathError(f"Unable to load classpath manifest - {path.resolve()}") from exc

    g = build_graph(manifest, path.resolve().parent)
    root = _coordinate(manifest.root).compact() if manifest.root else None
    deps = resolve(g, root)
    logger.debug("Loaded %d resolved artifacts from %s", len(deps), path)
    return ResolvedClasspath(graph=g, root=root, dependencies=deps)


def find_archives(root: Path) -> list[Path]:
    """Find archive files under root.

    Args:
        root: A directory to scan recursively, or a single archive.

    Returns:
        Sorted unique list of `*.jar` files.
    """
    if root.is_file():
        return [root]

    archives: list[Path] = []
    for p in root.rglob("*"):
        if not p.is_file():
            continue
        if p.name.lower().endswith(".jar"):
            archives.append(p)
    return sorted(set(archives))


def read_embedded_coordinate(path: Path) -> Coordinate | None:
    """Read the coordinate from an archive's embedded `pom.properties`, if any."""
    with open_archive(path) as archive:
        names = [n for n in archive.namelist() if _POM_PROPERTIES_RE.match(n)]
        if not names:
            return None
        entry = sorted(names)[0]
        text = archive.read(entry).decode("latin-1")
    try:
        props = properties.loads(text)
    except ValueError as exc:
        raise ClasspathError(f"Malformed {entry} in {path.resolve()} ({exc})") from exc

    group = props.get("groupId")
    artifact = props.get("artifactId")
    version = props.get("version")
    if not (group and artifact and version):
        return None
    return Coordinate(group=group, artifact=artifact, version=version)


def scan_directory(root: Path) -> ResolvedClasspath:
    """Treat every archive under `root` as a resolved dependency.

    Raises:
        ClasspathError: If an archive does not carry an embedded coordinate.
    """
    g = nx.DiGraph()
    for archive in find_archives(root):
        coordinate = read_embedded_coordinate(archive)
        if coordinate is None:
            raise ClasspathError(f"Unable to determine coordinate of {archive.resolve()}")
        g.add_node(coordinate.compact(), file=archive, type="jar")

    deps = resolve(g, None)
    logger.debug("Found %d archives under %s", len(deps), root)
    return ResolvedClasspath(graph=g, dependencies=deps)


def load_classpath(source: Path) -> ResolvedClasspath:
    """Load a classpath from a manifest file or a directory of archives."""
    if not source.exists():
        raise ClasspathError(f"Classpath source not found: {source}")
    if source.is_dir() or source.suffix.lower() == ".jar":
        return scan_directory(source)
    return load_manifest(source)
