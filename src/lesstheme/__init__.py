"""
lesstheme - color-only LESS theme files for runtime theme switching.

Compiles a component library's LESS sources, keeps only the color
declarations, and rewrites the concrete colors back into theme variables.
"""

from __future__ import annotations

from ._version import get_version
from .core import (
    CompileError,
    ConfigError,
    CyclicAliasError,
    SourceError,
    ThemeConfig,
    ThemeDocument,
    ThemeError,
    generate_color_map,
    generate_theme,
    is_valid_color,
    load_config,
    load_less_vars,
    random_color,
    render_less_content,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "ThemeConfig",
    "ThemeDocument",
    "generate_theme",
    "generate_color_map",
    "is_valid_color",
    "load_config",
    "load_less_vars",
    "random_color",
    "render_less_content",
    "ThemeError",
    "ConfigError",
    "SourceError",
    "CompileError",
    "CyclicAliasError",
]
