"""
formwork command line interface.

Commands:
- init: Scaffold a formwork.toml and a starter DSL file
- validate: Parse and validate the DSL, printing every diagnostic
- inspect: Summarize the AppSpec (or dump it as JSON)
- generators: List available generators
- build: Generate artifact trees and optionally run migrations
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from formwork._version import get_version
from formwork.core import ir
from formwork.core.errors import ConfigError, FormworkError, MigrationError, ParseError, ValidationError
from formwork.core.manifest import MANIFEST_NAME, ProjectManifest, load_manifest
from formwork.core.parser import build_source, validate_source
from formwork.migrations import run_migrations
from formwork.scaffold import init_project
from formwork.stacks import REGISTRY, list_generators
from formwork.stacks.orchestrator import GenerationReport, generate

app = typer.Typer(
    name="formwork",
    help="Generate full-stack applications from a declarative DSL.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()

MANIFEST_OPTION = typer.Option(None, "--manifest", "-m", help=f"Path to {MANIFEST_NAME}")
DSL_OPTION = typer.Option(None, "--dsl", "-d", help="DSL file (overrides the manifest's)")


# =============================================================================
# Helper Functions
# =============================================================================


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"formwork {get_version()}")
        raise typer.Exit()


def _load_project(manifest: Path | None, dsl: Path | None) -> tuple[Path, ProjectManifest | None]:
    """
    Find the DSL file and, if there is one, the manifest.

    An explicit --dsl wins; otherwise the manifest (default ./formwork.toml)
    names the DSL file.
    """
    if dsl is not None and manifest is None:
        return dsl, None
    manifest_path = manifest or Path(MANIFEST_NAME)
    project = load_manifest(manifest_path)
    return dsl or project.dsl, project


def _read_dsl(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read DSL file {path}: {e.strerror or e}") from e


def _build_spec(path: Path, project: ProjectManifest | None) -> ir.AppSpec:
    text = _read_dsl(path)
    default_name = project.name if project else path.stem
    return build_source(text, path, default_name=default_name)


def _print_human_diagnostics(errors: list[str], warnings: list[str]) -> None:
    """Print diagnostics in human-readable format."""
    if errors:
        typer.echo("Validation failed:\n", err=True)
        for err in errors:
            typer.echo(f"ERROR: {err}", err=True)

    for warn in warnings:
        typer.echo(f"WARNING: {warn}")

    if not errors:
        typer.echo("OK: spec is valid.")


def _parse_error_lines(error: ParseError, path: Path, fmt: str) -> list[str]:
    position = error.position
    if fmt == "vscode":
        return [f"{path}:{position.line}:{position.column}: error: {error.message}"]
    return [f"{path}:{position}: {error.message}"]


def _validation_error_lines(error: ValidationError, path: Path, fmt: str) -> list[str]:
    lines = []
    for err in error.errors:
        if fmt == "vscode":
            line, column = (err.position.line, err.position.column) if err.position else (1, 1)
            lines.append(f"{path}:{line}:{column}: error: {err.message}")
        else:
            lines.append(err.format(path))
    return lines


def _print_report(report: GenerationReport, output: Path) -> None:
    table = Table(title=f"Generated into {output}")
    table.add_column("Generator", style="bold")
    table.add_column("Status")
    table.add_column("Written", justify="right")
    table.add_column("Unchanged", justify="right")

    for name in REGISTRY:
        if name in report.successes:
            table.add_row(
                name,
                "[green]ok[/green]",
                str(len(report.successes[name])),
                str(len(report.unchanged.get(name, []))),
            )
        elif name in report.failures:
            table.add_row(name, "[red]failed[/red]", "-", "-")
    console.print(table)

    for warning in report.warnings:
        typer.echo(f"WARNING: {warning}")
    for name, error in report.failures.items():
        typer.echo(f"ERROR: [{name}] {error.message}", err=True)


# =============================================================================
# Commands
# =============================================================================


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def init(
    path: Path = typer.Argument(Path("."), help="Directory to create the project in"),
    name: str | None = typer.Option(None, "--name", "-n", help="Project name (defaults to the directory name)"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing manifest and DSL file"),
) -> None:
    """
    Create formwork.toml and a starter app.fw.
    """
    try:
        written = init_project(path, name=name, force=force)
    except (ConfigError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    for file in written:
        typer.echo(f"Created {file}")
    typer.echo("\nNext steps:")
    if path != Path("."):
        typer.echo(f"  cd {path}")
    typer.echo("  formwork validate")
    typer.echo("  formwork build")


@app.command()
def validate(
    manifest: Path | None = MANIFEST_OPTION,
    dsl: Path | None = DSL_OPTION,
    format: str = typer.Option("human", "--format", "-f", help="Output format: 'human' or 'vscode'"),
) -> None:
    """
    Parse and validate the DSL, reporting every semantic error.
    """
    if format not in ("human", "vscode"):
        typer.echo(f"Error: unknown format '{format}' (expected 'human' or 'vscode')", err=True)
        raise typer.Exit(code=2)

    try:
        path, _project = _load_project(manifest, dsl)
        validated = validate_source(_read_dsl(path), path)
    except ParseError as e:
        for line in _parse_error_lines(e, path, format):
            typer.echo(line, err=True)
        raise typer.Exit(code=1) from e
    except ValidationError as e:
        lines = _validation_error_lines(e, path, format)
        if format == "vscode":
            for line in lines:
                typer.echo(line, err=True)
        else:
            _print_human_diagnostics(lines, [])
        raise typer.Exit(code=1) from e
    except FormworkError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    warnings = list(validated.warnings)
    if format == "vscode":
        for warn in warnings:
            typer.echo(f"{path}:1:1: warning: {warn}")
    else:
        _print_human_diagnostics([], warnings)


@app.command()
def inspect(
    manifest: Path | None = MANIFEST_OPTION,
    dsl: Path | None = DSL_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the AppSpec as JSON"),
) -> None:
    """
    Summarize entities, pages, views and workflows.
    """
    try:
        path, project = _load_project(manifest, dsl)
        spec = _build_spec(path, project)
    except FormworkError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    if as_json:
        typer.echo(spec.model_dump_json(indent=2))
        return

    console.print(f"[bold]{spec.name}[/bold] (db: {spec.config.db.value})")

    entities = Table(title="Entities")
    entities.add_column("Entity", style="bold")
    entities.add_column("Fields", justify="right")
    entities.add_column("Relations")
    for entity in spec.entities:
        relations = ", ".join(f"{edge.name} ({edge.cardinality.value})" for edge in entity.relations)
        entities.add_row(entity.name, str(len(entity.fields)), relations or "-")
    console.print(entities)

    if spec.pages:
        pages = Table(title="Pages")
        pages.add_column("Page", style="bold")
        pages.add_column("Type")
        pages.add_column("Route")
        pages.add_column("Entity")
        pages.add_column("Permissions")
        for page in spec.pages:
            pages.add_row(
                page.name,
                page.kind.value,
                page.route,
                page.entity or "-",
                ", ".join(page.permissions) or "public",
            )
        console.print(pages)

    for view in spec.views:
        console.print(f"view [bold]{view.name}[/bold] from {view.source_entity}: {len(view.fields)} field(s)")
    for wf in spec.workflows:
        console.print(f"workflow [bold]{wf.name}[/bold] on {wf.trigger.event}: {len(wf.steps)} step(s)")


@app.command()
def generators() -> None:
    """
    List available generators in run order.
    """
    table = Table(title="Generators")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Provides")
    table.add_column("Requires")
    for name, generator_class in REGISTRY.items():
        table.add_row(
            name,
            generator_class.description,
            ", ".join(generator_class.provides) or "-",
            ", ".join(generator_class.requires) or "-",
        )
    console.print(table)


@app.command()
def build(
    manifest: Path | None = MANIFEST_OPTION,
    dsl: Path | None = DSL_OPTION,
    generator: list[str] | None = typer.Option(
        None, "--generator", "-g", help=f"Generator to run (repeatable): {', '.join(list_generators())}"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
    skip_migrations: bool = typer.Option(False, "--skip-migrations", help="Do not run migrations"),
    migrations_only: bool = typer.Option(
        False, "--migrations-only", help="Run migrations on existing output without generating"
    ),
    clean: bool = typer.Option(False, "--clean", help="Remove generator output directories first"),
) -> None:
    """
    Generate artifact trees from the DSL.
    """
    if skip_migrations and migrations_only:
        typer.echo("Error: --skip-migrations and --migrations-only are mutually exclusive", err=True)
        raise typer.Exit(code=2)

    try:
        path, project = _load_project(manifest, dsl)
        spec = _build_spec(path, project)
    except FormworkError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    out_dir = output or (project.generate.output if project else Path("build"))
    enabled = generator or (project.generate.generators if project else list_generators())
    options = project.generate.options if project else None

    if not migrations_only:
        if clean:
            for name in enabled:
                target = out_dir / name
                if target.exists():
                    shutil.rmtree(target)
        try:
            report = generate(spec, out_dir, enabled, options)
        except ConfigError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e
        _print_report(report, out_dir)
        if not report.ok:
            raise typer.Exit(code=1)

    run = migrations_only or (project is not None and project.migrations.enabled and not skip_migrations)
    if not run:
        return

    backend_dir = out_dir / "backend"
    if not (backend_dir / "alembic.ini").exists():
        typer.echo(f"Error: no generated backend at {backend_dir}; run build first", err=True)
        raise typer.Exit(code=1)

    kwargs = {}
    if project is not None:
        kwargs = {"command": project.migrations.command, "timeout": project.migrations.timeout}
    try:
        result = run_migrations(backend_dir, **kwargs)
    except MigrationError as e:
        typer.echo(f"Error: {e}", err=True)
        if e.output:
            typer.echo(e.output, err=True)
        raise typer.Exit(code=1) from e
    console.print(f"[green]Migrations applied[/green] ({' '.join(result.command)})")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
