"""Stylesheet discovery for a component library tree."""

from __future__ import annotations

from pathlib import Path


def library_entry(library_dir: Path) -> Path:
    """The library's main stylesheet."""
    return library_dir / "style" / "index.less"


def default_var_file(library_dir: Path) -> Path:
    """The library's default theme variable file."""
    return library_dir / "style" / "themes" / "default.less"


def discover_component_styles(library_dir: Path) -> list[Path]:
    """One ``<component>/style/index.less`` per library component."""
    return sorted(library_dir.glob("*/style/index.less"))


def discover_secondary_styles(secondary_dir: Path | None) -> list[Path]:
    """Every ``style/*.less`` file below a secondary component tree."""
    if secondary_dir is None or not secondary_dir.is_dir():
        return []
    return sorted(secondary_dir.glob("**/style/*.less"))


def discover_module_styles(styles_dir: Path) -> list[Path]:
    """Every LESS file of the application's own styles."""
    if not styles_dir.is_dir():
        return []
    return sorted(styles_dir.rglob("*.less"))


def less_search_paths(
    library_dir: Path, styles_dir: Path, secondary_dir: Path | None = None
) -> list[Path]:
    """Include paths handed to the compiler."""
    paths = [library_dir / "style", styles_dir]
    if secondary_dir is not None:
        paths.append(secondary_dir / "style")
    return paths
