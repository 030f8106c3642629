"""
lesstheme CLI.

Commands:
- generate: Build the color-only theme file
- vars: Show the color variables a LESS file declares
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from lesstheme._version import get_version
from lesstheme.core.bundler import bundle_less
from lesstheme.core.config import ThemeConfig, load_config, parse_config
from lesstheme.core.errors import SourceError, ThemeError
from lesstheme.core.generator import generate_theme
from lesstheme.core.variables import generate_color_map, load_less_vars

app = typer.Typer(
    help="Generate color-only LESS theme files for runtime theme switching.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"lesstheme version {get_version()}")
        typer.echo(f"  Python: {platform.python_implementation()} {platform.python_version()}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.getenv("LESSTHEME_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _absolute(path: Path | None) -> Path | None:
    return path.resolve() if path is not None else None


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version information",
    ),
) -> None:
    """lesstheme CLI main callback for global options."""
    pass


@app.command("generate")
def generate_command(
    config: Path = typer.Option(
        None, "--config", "-c", help="lesstheme.toml or pyproject.toml with [tool.lesstheme]"
    ),
    library_dir: Path = typer.Option(None, "--library-dir", help="Component library root"),
    styles_dir: Path = typer.Option(None, "--styles-dir", help="Application styles directory"),
    secondary_dir: Path = typer.Option(None, "--secondary-dir", help="Second component tree"),
    var_file: Path = typer.Option(None, "--var-file", help="Theme variable file"),
    output: Path = typer.Option(None, "--output", "-o", help="Theme file to write"),
    strict: bool | None = typer.Option(
        None, "--strict/--relaxed", help="Keep only declarations holding a known theme color"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
) -> None:
    """Build the color-only theme file.

    Examples:
        lesstheme generate -c lesstheme.toml
        lesstheme generate --library-dir node_modules/antd/lib --styles-dir src/styles -o public/color.less
    """
    _configure_logging(verbose)
    overrides = {
        "library_dir": _absolute(library_dir),
        "styles_dir": _absolute(styles_dir),
        "secondary_dir": _absolute(secondary_dir),
        "var_file": _absolute(var_file),
        "output_path": _absolute(output),
        "strict_color_only": strict,
    }

    try:
        if config is not None:
            theme_config: ThemeConfig = load_config(config, **overrides)
        else:
            theme_config = parse_config({k: v for k, v in overrides.items() if v is not None})
        document = generate_theme(theme_config)
    except ThemeError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(code=1)

    if theme_config.output_path is None:
        typer.echo(document.text)
    else:
        console.print(
            f"[green]✓[/green] Theme written to {theme_config.output_path} "
            f"({len(document.declarations)} variables)"
        )


@app.command("vars")
def vars_command(
    var_file: Path = typer.Argument(..., help="LESS variable file"),
    colors_only: bool = typer.Option(False, "--colors-only", help="Hide non-color variables"),
) -> None:
    """Show the variables a LESS file declares and the colors they resolve to.

    Local imports are inlined first, so aliases to variables defined in
    imported files resolve too.
    """
    try:
        declared = load_less_vars(var_file)
        mapping = generate_color_map(bundle_less(var_file))
    except SourceError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(code=1)

    table = Table(title=str(var_file))
    table.add_column("Variable", style="cyan")
    table.add_column("Declared")
    table.add_column("Color", style="green")
    for name, raw in declared.items():
        color = mapping.get(name)
        if colors_only and color is None:
            continue
        table.add_row(name, raw, color or "-")
    console.print(table)


def main() -> None:
    app(standalone_mode=True)


if __name__ == "__main__":
    main()
