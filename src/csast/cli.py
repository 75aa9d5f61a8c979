from __future__ import annotations

import json
import logging
from enum import Enum
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.pretty import Pretty
from rich.table import Table

from csast.compiler.options import ConvertOptions
from csast.compiler.pipeline import ConversionUnit, convert_source
from csast.config import (
    CsastConfig,
    OutputFormat,
    discover_config_path,
    load_config,
    resolve_tree_path,
)
from csast.diag.cli_diagnostics import config_load_error, file_read_error, missing_tree_file
from csast.diag.diagnostic import Diagnostic, Severity
from csast.diag.reporter import DiagnosticReporter
from csast.diag.source import SourceText
from csast.parse import ast
from csast.parse.serialize import iter_nodes, to_dict

app = typer.Typer(
    help="Normalize CoffeeScript parse trees into a located AST",
    no_args_is_help=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

LOGGER = logging.getLogger(__name__)


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"


@app.callback(invoke_without_command=True)
def root_callback(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is not None:
        return

    console = Console()
    try:
        csast_version = version("csast")
    except PackageNotFoundError:
        csast_version = "unknown"

    console.print(
        Panel(
            (
                f"[bold cyan]Welcome to csast v{csast_version}[/bold cyan]\n\n"
                "[white]Converts a CoffeeScript parser's tree into a normalized AST "
                "with exact source ranges.[/white]"
            ),
            title="[bold green]csast CLI[/bold green]",
            border_style="bright_blue",
            expand=False,
        )
    )

    quickstart = Table(
        title="Quick Start", show_header=True, header_style="bold magenta", expand=True
    )
    quickstart.add_column("Workflow", style="bold yellow", ratio=1)
    quickstart.add_column("Command", style="green", ratio=2)
    quickstart.add_row("Convert to JSON", "csast convert app.coffee --json")
    quickstart.add_row("Explicit tree dump", "csast convert app.coffee -t app.nodes.json")
    quickstart.add_row("Check only", "csast check app.coffee")
    quickstart.add_row("Node vocabulary", "csast kinds")
    console.print(quickstart)
    console.print("[dim]Use `csast --help` for full command documentation.[/dim]")


def _configure_logging(level: LogLevel) -> None:
    resolved_level = getattr(logging, level.value.upper())

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    root.setLevel(resolved_level)
    handler = logging.StreamHandler()
    handler.setLevel(resolved_level)
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    root.addHandler(handler)


def _print_diags(
    console: Console, source: SourceText | None, diagnostics: list[Diagnostic]
) -> bool:
    if diagnostics:
        DiagnosticReporter(console=console).print(source, diagnostics)
    return any(diag.severity == Severity.ERROR for diag in diagnostics)


def _load_cli_config(
    console: Console, *, source_path: Path, explicit_config: Path | None
) -> CsastConfig:
    config_path = discover_config_path(source_path=source_path, explicit_config=explicit_config)
    if config_path is None:
        return CsastConfig()
    try:
        return load_config(config_path)
    except (OSError, ValueError) as exc:
        _print_diags(console, None, [config_load_error(config_path, exc)])
        raise typer.Exit(code=1) from None


def _run_conversion(
    console: Console,
    *,
    file: Path,
    tree: Path | None,
    config: CsastConfig,
) -> ConversionUnit:
    tree_path = resolve_tree_path(source_path=file, explicit_tree=tree, config=config)
    if tree is None and not tree_path.is_file():
        _print_diags(console, None, [missing_tree_file(tree_path, source_path=file)])
        raise typer.Exit(code=1)

    texts: list[str] = []
    for path in (file, tree_path):
        try:
            texts.append(path.read_text(encoding="utf-8"))
        except OSError as exc:
            _print_diags(console, None, [file_read_error(path, exc)])
            raise typer.Exit(code=1) from None

    options = ConvertOptions(filename=str(file), tree_filename=str(tree_path))
    unit = convert_source(texts[0], texts[1], options=options)
    if _print_diags(console, unit.source, unit.diagnostics) or unit.ast is None:
        raise typer.Exit(code=1)
    return unit


@app.command("convert", help="Convert a source file and its upstream tree to a normalized AST.")
def convert(
    file: Path = typer.Argument(..., help="Path to the CoffeeScript source file."),
    tree: Path | None = typer.Option(
        None, "--tree", "-t", help="Path to the upstream tree JSON dump."
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to a csast.toml file."),
    json_out: bool = typer.Option(False, "--json", "-j", help="Print the AST as JSON."),
    no_raw: bool = typer.Option(False, "--no-raw", help="Omit `raw` source slices from JSON."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the JSON AST to this file instead of stdout."
    ),
    no_color: bool = typer.Option(False, "--no-color", "-n", help="Disable ANSI color output."),
    log_level: LogLevel = typer.Option(
        LogLevel.warning,
        "--log-level",
        "-l",
        help="Set CLI log verbosity.",
    ),
) -> None:
    console = Console(no_color=no_color)
    _configure_logging(log_level)

    cfg = _load_cli_config(console, source_path=file, explicit_config=config)
    include_raw = cfg.output.include_raw and not no_raw
    unit = _run_conversion(console, file=file, tree=tree, config=cfg)
    assert unit.ast is not None

    want_json = json_out or output is not None or cfg.output.format == OutputFormat.json
    if not want_json:
        console.print(Pretty(unit.ast))
        return

    indent = cfg.output.indent or None
    payload = json.dumps(to_dict(unit.ast, include_raw=include_raw), indent=indent)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload + "\n", encoding="utf-8")
        LOGGER.info("Wrote AST to %s", output)
        console.print(f"Wrote {output}")
    else:
        typer.echo(payload)


@app.command("check", help="Convert a source file and report diagnostics only.")
def check(
    file: Path = typer.Argument(..., help="Path to the CoffeeScript source file."),
    tree: Path | None = typer.Option(
        None, "--tree", "-t", help="Path to the upstream tree JSON dump."
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to a csast.toml file."),
    no_color: bool = typer.Option(False, "--no-color", "-n", help="Disable ANSI color output."),
    log_level: LogLevel = typer.Option(
        LogLevel.warning,
        "--log-level",
        "-l",
        help="Set CLI log verbosity.",
    ),
) -> None:
    console = Console(no_color=no_color)
    _configure_logging(log_level)

    cfg = _load_cli_config(console, source_path=file, explicit_config=config)
    unit = _run_conversion(console, file=file, tree=tree, config=cfg)
    assert unit.ast is not None

    nodes = iter_nodes(unit.ast)
    virtual = sum(1 for node in nodes if node.virtual)
    status = f"{len(unit.diagnostics)} warning(s)." if unit.diagnostics else "No diagnostics."
    console.print(f"{status} {len(nodes)} node(s), {virtual} virtual.")


@app.command("kinds", help="List the normalized node kinds.")
def kinds(
    no_color: bool = typer.Option(False, "--no-color", "-n", help="Disable ANSI color output."),
) -> None:
    console = Console(no_color=no_color)
    table = Table(title="Node kinds", show_header=True, header_style="bold magenta")
    table.add_column("Kind", style="bold yellow")
    for kind in ast.NodeKind:
        table.add_row(kind.value)
    console.print(table)


def main() -> None:
    app()
