"""Typer CLI entry point for ext-dep-verifier."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ext_dep_verifier.catalog import generate_catalog, load_catalog
from ext_dep_verifier.classpath import ResolvedClasspath, load_classpath
from ext_dep_verifier.config import ProjectConfig
from ext_dep_verifier.exceptions import ConsistencyError, ExtDepError
from ext_dep_verifier.publication import Publication, adjust_publication
from ext_dep_verifier.scanner import (
    has_deployment_marker,
    read_deployment_coordinate,
    write_extension_properties,
)
from ext_dep_verifier.verifier import run_verification
from ext_dep_verifier.visualize import build_catalog_table, build_violation_tree

app = typer.Typer(
    add_completion=False,
    help="Keep an extension's runtime, deployment and spi artifacts consistent.",
)
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(exc: ExtDepError, classpath: ResolvedClasspath | None = None) -> NoReturn:
    if isinstance(exc, ConsistencyError) and exc.coordinates:
        console.print(build_violation_tree(str(exc), exc.coordinates, classpath))
    else:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(code=1) from None


def _config(
    *,
    build_dir: Path | None = None,
    group: str | None = None,
    name: str | None = None,
    version: str | None = None,
    spi: bool | None = None,
) -> ProjectConfig:
    config = ProjectConfig.from_env()
    if build_dir is not None:
        config.build_dir = build_dir
    if group:
        config.group = group
    if name:
        config.name = name
    if version:
        config.version = version
    if spi is not None:
        config.has_spi = spi
    return config


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    level = "DEBUG" if verbose else ProjectConfig.from_env().log_level
    configure_logging(level)


@app.command()
def scan(
    archives: Annotated[list[Path], typer.Argument(help="Archives to inspect.")],
) -> None:
    """Show which extension markers each archive carries."""
    try:
        table = Table(title="Archive markers")
        table.add_column("Archive")
        table.add_column("Deployment")
        table.add_column("Extension (deployment artifact)")
        for archive in archives:
            deployment = has_deployment_marker(archive)
            companion = read_deployment_coordinate(archive)
            table.add_row(
                str(archive),
                "yes" if deployment else "no",
                str(companion) if companion is not None else "no",
            )
        console.print(table)
    except ExtDepError as exc:
        _fail(exc)


@app.command()
def catalog(
    classpath: Annotated[
        Path,
        typer.Argument(help="Runtime classpath: a JSON classpath manifest or a directory of archives."),
    ],
    out: Annotated[Optional[Path], typer.Option("--out", help="Catalog file path.")] = None,
    build_dir: Annotated[Optional[Path], typer.Option("--build-dir", help="Build output directory.")] = None,
    force: Annotated[bool, typer.Option("--force", help="Rebuild even if up-to-date.")] = False,
) -> None:
    """Check the runtime classpath and write the extension catalog."""
    config = _config(build_dir=build_dir)
    output = out or config.catalog_path
    resolved: ResolvedClasspath | None = None
    try:
        resolved = load_classpath(classpath)
        entries = generate_catalog(resolved.dependencies, output, force=force)
    except ExtDepError as exc:
        _fail(exc, resolved)

    console.print(build_catalog_table(entries))
    console.print(f"[green]Wrote[/green] {output}")


@app.command()
def verify(
    classpath: Annotated[
        Path,
        typer.Argument(help="Deployment classpath: a JSON classpath manifest or a directory of archives."),
    ],
    catalog_file: Annotated[Optional[Path], typer.Option("--catalog", help="Catalog file path.")] = None,
    build_dir: Annotated[Optional[Path], typer.Option("--build-dir", help="Build output directory.")] = None,
) -> None:
    """Check that every extension on the deployment classpath is a runtime dependency."""
    config = _config(build_dir=build_dir)
    resolved: ResolvedClasspath | None = None
    try:
        entries = load_catalog(catalog_file or config.catalog_path)
        resolved = load_classpath(classpath)
        run_verification(entries, resolved.dependencies, config.verification_output_path)
    except ExtDepError as exc:
        _fail(exc, resolved)

    console.print("[green]Deployment classpath is consistent with the runtime catalog.[/green]")


@app.command()
def adjust(
    publication: Annotated[Publication, typer.Argument(help="Publication the documents belong to.")],
    pom: Annotated[Optional[Path], typer.Option("--pom", help="Generated POM file.")] = None,
    module: Annotated[Optional[Path], typer.Option("--module", help="Generated module metadata file.")] = None,
    group: Annotated[Optional[str], typer.Option("--group", help="Project group.")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Project name.")] = None,
    version: Annotated[Optional[str], typer.Option("--version", help="Project version.")] = None,
    spi: Annotated[Optional[bool], typer.Option("--spi/--no-spi", help="Project publishes an spi artifact.")] = None,
) -> None:
    """Post-process a publication's generated POM and module metadata."""
    if pom is None and module is None:
        console.print("[bold red]Error:[/bold red] Nothing to adjust; pass --pom and/or --module.")
        raise typer.Exit(code=1)

    try:
        project = _config(group=group, name=name, version=version, spi=spi).project()
        plan = adjust_publication(publication, project, pom=pom, module=module)
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from None
    except ExtDepError as exc:
        _fail(exc)

    target = plan.companion.compact() if plan.companion is not None else "none"
    console.print(f"[green]Adjusted[/green] {publication.value} publication (dependency: {target})")


@app.command("extension-properties")
def extension_properties(
    out: Annotated[Optional[Path], typer.Option("--out", help="Output properties file.")] = None,
    build_dir: Annotated[Optional[Path], typer.Option("--build-dir", help="Build output directory.")] = None,
    group: Annotated[Optional[str], typer.Option("--group", help="Project group.")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Project name.")] = None,
    version: Annotated[Optional[str], typer.Option("--version", help="Project version.")] = None,
) -> None:
    """Generate the extension marker bundled into the runtime artifact."""
    config = _config(build_dir=build_dir, group=group, name=name, version=version)
    try:
        project = config.project()
        path = write_extension_properties(
            out or config.extension_properties_path,
            project.coordinate("deployment"),
        )
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from None
    except ExtDepError as exc:
        _fail(exc)

    console.print(f"[green]Wrote[/green] {path}")


def main() -> None:
    """Console-script entry point."""
    app()
