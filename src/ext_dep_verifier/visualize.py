"""Rich rendering utilities for catalogs and verification failures."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from ext_dep_verifier.classpath import ResolvedClasspath


def build_catalog_table(catalog: Mapping[str, str], *, title: str = "Extension catalog") -> Table:
    """Build a Rich Table of extension -> deployment coordinates."""
    table = Table(title=title)
    table.add_column("#", style="dim", width=6)
    table.add_column("Extension")
    table.add_column("Deployment artifact")
    for i, key in enumerate(sorted(catalog), start=1):
        table.add_row(str(i), key, catalog[key])
    return table


def build_violation_tree(
    title: str,
    coordinates: Iterable[str],
    classpath: ResolvedClasspath | None = None,
) -> Tree:
    """Build a Rich Tree listing offending coordinates.

    When the classpath knows its root, each coordinate gets the dependency
    chain that pulled it in.
    """
    root = Tree(f"[bold red]{escape(title)}[/bold red]")
    for coordinate in coordinates:
        branch = root.add(f"[bold]{escape(coordinate)}[/bold]")
        chain = classpath.path_to(coordinate) if classpath is not None else []
        if len(chain) > 1:
            branch.add("[dim]via[/dim] " + escape(" -> ".join(chain)))
    return root
