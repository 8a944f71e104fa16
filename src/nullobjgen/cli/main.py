"""
NullObjGen CLI - Main entry point.

Provides commands for generating null object stand-ins from annotated C# declarations.
"""

import logging
from pathlib import Path
from typing import Optional

import orjson
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from nullobjgen.config.loader import (
    ConfigurationError,
    generate_default_config,
    load_config,
)
from nullobjgen.config.models import NullObjConfig
from nullobjgen.generator.diagnostics import Diagnostic, DiagnosticSeverity
from nullobjgen.generator.pipeline import (
    GenerationResult,
    discover_source_files,
    generate_from_files,
    write_sources,
)

app = typer.Typer(
    name="nullobjgen",
    help="Generate null object implementations for annotated C# classes and interfaces",
    no_args_is_help=True,
)

console = Console()


# =============================================================================
# Helper Functions
# =============================================================================


def print_banner():
    """Print NullObjGen banner."""
    console.print(
        Panel.fit("[bold cyan]NullObjGen[/bold cyan]\nNull object source generator", border_style="cyan")
    )


def configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(name)s: %(message)s")


def validate_path(path: str, must_exist: bool = True) -> Path:
    """Validate and return a Path object."""
    p = Path(path)
    if must_exist and not p.exists():
        raise typer.BadParameter(f"Path does not exist: {path}")
    return p


def load_cli_config(config: Optional[str]) -> NullObjConfig:
    try:
        return load_config(Path(config) if config else None)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(2)


def collect_files(source: Path, cfg: NullObjConfig) -> list[Path]:
    from nullobjgen.languages.registry import get_plugin

    plugin = get_plugin(cfg.source.language)
    files = discover_source_files(source, plugin.file_extensions, cfg.source.exclude_patterns)
    if not files:
        console.print(f"[yellow]No source files found under {source}[/yellow]")
    return files


_SEVERITY_STYLE = {
    DiagnosticSeverity.ERROR: "bold red",
    DiagnosticSeverity.WARNING: "yellow",
    DiagnosticSeverity.INFO: "cyan",
}


def display_diagnostics(diagnostics: list[Diagnostic]) -> None:
    if not diagnostics:
        return
    table = Table(title="Diagnostics", show_header=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Location")
    table.add_column("Message")
    for diagnostic in diagnostics:
        message = diagnostic.message
        if diagnostic.severity == DiagnosticSeverity.ERROR and "\n" in message:
            # Tracebacks: first and last line only; full text is in the log
            lines = message.strip().splitlines()
            message = f"{lines[0]} ... {lines[-1]}"
        table.add_row(
            f"[{_SEVERITY_STYLE[diagnostic.severity]}]{diagnostic.severity.value}[/]",
            diagnostic.id,
            str(diagnostic.location or ""),
            message,
        )
    console.print(table)


def display_result(result: GenerationResult) -> None:
    table = Table(title="Generated Null Objects", show_header=True)
    table.add_column("Target", style="cyan")
    table.add_column("File")
    table.add_column("Interfaces", justify="right")
    table.add_column("Properties", justify="right")
    table.add_column("Methods", justify="right")
    for outcome in result.outcomes:
        if outcome.meta is None:
            table.add_row(outcome.target.declaration, "[red]failed[/red]", "-", "-", "-")
            continue
        table.add_row(
            outcome.meta.qualified_name,
            outcome.source.hint_name if outcome.source else "[red]skipped[/red]",
            str(len(outcome.meta.interfaces)),
            str(len(outcome.meta.properties)),
            str(len(outcome.meta.methods)),
        )
    console.print(table)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def generate(
    source: Optional[str] = typer.Argument(None, help="Source directory or file (default: source.root)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output directory"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report what would be generated without writing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Generate null object stand-ins for annotated declarations.

    Examples:
        nullobjgen generate ./Assets/Scripts -o ./Assets/Scripts/Generated
        nullobjgen generate ./src -c nullobjgen.yaml --dry-run
    """
    print_banner()
    configure_logging(verbose)

    cfg = load_cli_config(config)
    if output:
        cfg.output.directory = Path(output)

    files = collect_files(validate_path(source or str(cfg.source.root)), cfg)
    console.print(f"[green]✓[/green] Found {len(files)} source files")

    result = generate_from_files(files, cfg)
    display_result(result)
    display_diagnostics(result.diagnostics)

    if dry_run:
        for generated in result.sources:
            console.print(f"  would write {cfg.output.directory / generated.hint_name}")
    else:
        written = write_sources(result.sources, cfg.output.directory)
        console.print(f"[green]✓[/green] Wrote {len(written)} files to {cfg.output.directory}")

    if result.has_errors:
        raise typer.Exit(1)


@app.command()
def inspect(
    source: Optional[str] = typer.Argument(None, help="Source directory or file (default: source.root)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
    as_json: bool = typer.Option(False, "--json", help="Print the extracted member models as JSON"),
):
    """Show the member model extracted for every annotated declaration."""
    cfg = load_cli_config(config)
    cfg.output.emit_attribute_source = False
    result = generate_from_files(collect_files(validate_path(source or str(cfg.source.root)), cfg), cfg)

    if as_json:
        document = [
            {
                "target": outcome.target.declaration,
                "type": outcome.meta.qualified_name,
                "policy": outcome.meta.policy.source_expression(cfg.markers.policy_enum),
                "interfaces": list(outcome.meta.interfaces),
                "properties": [
                    {"name": p.name, "type": p.type, "get": p.has_getter, "set": p.has_setter}
                    for p in outcome.meta.properties
                ],
                "methods": [
                    {
                        "name": m.name,
                        "returns": m.return_type,
                        "parameters": [p.render() for p in m.parameters],
                        "declared_in": m.declaring_interface,
                    }
                    for m in outcome.meta.methods
                ],
                "imports": sorted(outcome.meta.imports),
            }
            for outcome in result.outcomes
            if outcome.meta is not None
        ]
        typer.echo(orjson.dumps(document, option=orjson.OPT_INDENT_2).decode())
        return

    for outcome in result.outcomes:
        meta = outcome.meta
        if meta is None:
            continue
        table = Table(title=f"{meta.qualified_name} ({meta.policy.source_expression(cfg.markers.policy_enum)})")
        table.add_column("Member", style="cyan")
        table.add_column("Signature")
        table.add_column("Declared In")
        for prop in meta.properties:
            accessors = []
            if prop.has_getter:
                accessors.append("get;")
            if prop.has_setter:
                accessors.append(f"{prop.setter_keyword};")
            table.add_row(prop.name, f"{prop.type} {{ {' '.join(accessors)} }}", prop.declaring_interface or "")
        for method in meta.methods:
            parameters = ", ".join(p.render() for p in method.parameters)
            table.add_row(method.name, f"{method.return_type} ({parameters})", method.declaring_interface or "")
        console.print(table)
        console.print(f"  imports: {', '.join(sorted(meta.imports)) or '-'}")

    display_diagnostics(result.diagnostics)


@app.command()
def attributes(
    output: Optional[str] = typer.Option(None, "--output", "-o", help="File to write instead of printing"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
):
    """Print or write the marker attribute definitions."""
    from nullobjgen.languages.registry import get_plugin

    cfg = load_cli_config(config)
    text = get_plugin(cfg.source.language).attribute_source(cfg.markers)
    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {path}")
    else:
        typer.echo(text, nl=False)


@app.command()
def init(
    path: str = typer.Argument("nullobjgen.yaml", help="Configuration file to create"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Write a default configuration file."""
    config_path = Path(path)
    if config_path.exists() and not force:
        console.print(f"[yellow]{config_path} already exists (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)
    generate_default_config(config_path)
    console.print(f"[green]✓[/green] Created {config_path}")


def main():
    app()


if __name__ == "__main__":
    main()
