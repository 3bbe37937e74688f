"""Theme CLI commands.

This module provides the ``termtheme`` command group: validating theme
documents, previewing resolved themes, dumping their escape code tables and
exporting them as self-contained files.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import EngineConfig, get_config, load_config
from ..errors import ThemeError, ValidationFailed
from ..theme_engine import (
    DocumentShape,
    TerminalCapability,
    ThemeDefinition,
    ThemeEngine,
    detect_format,
    detect_shape,
    parse_document,
)
from ..theme_engine.parser import decode

console = Console()

CAPABILITY_CHOICES = [c.value for c in TerminalCapability]


def _engine(ctx: click.Context) -> ThemeEngine:
    return ThemeEngine.from_config(ctx.obj["config"])


def _resolve_path(ctx: click.Context, path: str) -> Path:
    """Accept a file path or a bare theme name found in ``theme_dirs``."""
    candidate = Path(path)
    if candidate.exists():
        return candidate
    config: EngineConfig = ctx.obj["config"]
    found = config.find_theme(path)
    return found if found is not None else candidate


def _load(ctx: click.Context, engine: ThemeEngine, path: str,
          theme_name: Optional[str]) -> ThemeDefinition:
    resolved = _resolve_path(ctx, path)
    if theme_name is None:
        return engine.load_theme(resolved)
    for theme in engine.load_collection(resolved):
        if theme.name == theme_name:
            return theme
    raise click.BadParameter(f"Theme '{theme_name}' not found in {resolved}", param_hint="--theme")


def _configure_logging(level: str) -> None:
    """Route engine warnings to stderr through rich, once per process."""
    package_logger = logging.getLogger("termtheme")
    package_logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=Console(stderr=True), show_time=False))


def _fail(action: str, error: Exception) -> None:
    console.print(f"[red]Error {action}: {escape(str(error))}[/red]")
    sys.exit(1)


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="Path to config file")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"],
                                               case_sensitive=False),
              help="Override the configured log level")
@click.pass_context
def main(ctx, config_path, log_level):
    """Validate, preview and export terminal color themes."""
    ctx.ensure_object(dict)
    config = load_config(Path(config_path)) if config_path else get_config()
    ctx.obj["config"] = config

    _configure_logging((log_level or config.log_level).upper())


@main.command()
@click.argument("path")
@click.pass_context
def validate(ctx, path: str):
    """Check a theme or collection document for errors."""
    resolved = _resolve_path(ctx, path)
    engine = _engine(ctx)
    try:
        text = engine.source.read_text(str(resolved))
        fmt = detect_format(resolved)
        shape = detect_shape(decode(text, fmt, str(resolved)))
        parse_document(text, shape, fmt, str(resolved))

        if shape == DocumentShape.COLLECTION:
            report = engine.load_collection_report(resolved)
            if report.errors:
                table = Table(title=f"Resolution problems ({report.summary()})",
                              show_header=True, header_style="bright")
                table.add_column("Error", style="yellow")
                for error in report.errors:
                    table.add_row(escape(error))
                console.print(table)
                sys.exit(1)
            console.print(f"[green]✓ {escape(str(resolved))}: {report.summary()}[/green]")
        else:
            theme = engine.load_theme(resolved)
            console.print(f"[green]✓ {escape(str(resolved))}: theme '{theme.name}' is valid[/green]")
    except ValidationFailed as e:
        table = Table(title=f"{len(e.errors)} validation errors in {escape(str(resolved))}",
                      show_header=True, header_style="bright")
        table.add_column("#", style="dim", width=4)
        table.add_column("Error", style="red")
        for index, error in enumerate(e.errors, 1):
            table.add_row(str(index), escape(error))
        console.print(table)
        sys.exit(1)
    except (ThemeError, OSError) as e:
        _fail("validating theme", e)


@main.command()
@click.argument("path")
@click.option("--theme", "theme_name", help="Theme to preview from a collection")
@click.option("--capability", type=click.Choice(CAPABILITY_CHOICES),
              help="Color capability to render with")
@click.pass_context
def preview(ctx, path: str, theme_name: Optional[str], capability: Optional[str]):
    """Preview a resolved theme."""
    try:
        engine = _engine(ctx)
        theme = _load(ctx, engine, path, theme_name)

        header = Text.assemble(
            (theme.name, f"bold {theme.palette.primary.hex}"),
            (f"  {theme.description}", "dim"),
        )
        console.print(Panel(header, title="Theme Preview", border_style=theme.palette.border.hex))

        table = Table(show_header=True, header_style="bright")
        table.add_column("Slot", style="cyan", min_width=15)
        table.add_column("Hex")
        table.add_column("Swatch", width=8)
        for slot, color in theme.palette.slots().items():
            table.add_row(slot, color.hex, Text("      ", style=f"on {color.hex}"))
        console.print(table)

        console.print(Text.from_ansi(engine.preview(theme, capability)))
    except (ThemeError, OSError) as e:
        _fail("previewing theme", e)


@main.command()
@click.argument("path")
@click.option("--theme", "theme_name", help="Theme to use from a collection")
@click.option("--capability", type=click.Choice(CAPABILITY_CHOICES),
              help="Color capability to encode for")
@click.pass_context
def codes(ctx, path: str, theme_name: Optional[str], capability: Optional[str]):
    """Print the escape code table of a resolved theme."""
    try:
        engine = _engine(ctx)
        theme = _load(ctx, engine, path, theme_name)
        table_codes = engine.get_ansi_codes(theme, capability)

        table = Table(title=f"Escape codes: {theme.name}", show_header=True,
                      header_style="bright")
        table.add_column("Name", style="cyan")
        table.add_column("Sequence")
        for name, code in table_codes.items():
            table.add_row(name, escape(repr(code)))
        console.print(table)
    except (ThemeError, OSError) as e:
        _fail("encoding theme", e)


@main.command()
@click.argument("path")
@click.argument("output", type=click.Path(dir_okay=False))
@click.option("--theme", "theme_name", help="Theme to export from a collection")
@click.pass_context
def export(ctx, path: str, output: str, theme_name: Optional[str]):
    """Write a resolved theme as a self-contained JSON or YAML file."""
    try:
        engine = _engine(ctx)
        theme = _load(ctx, engine, path, theme_name)
        engine.save_theme_to_file(theme, output)
        console.print(f"[green]✓ Exported theme '{theme.name}' to {escape(output)}[/green]")
    except (ThemeError, OSError) as e:
        _fail("exporting theme", e)
