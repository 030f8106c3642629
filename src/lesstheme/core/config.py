"""
Theme generation configuration.

Options can be given directly, or loaded from a ``lesstheme.toml`` file
(top-level keys) or the ``[tool.lesstheme]`` table of a ``pyproject.toml``::

    [tool.lesstheme]
    library_dir = "node_modules/antd/lib"
    styles_dir = "src/styles"
    var_file = "src/styles/variables.less"
    output_path = "public/color.less"
    strict_color_only = false

Relative paths are resolved against the directory of the config file.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .compiler import DEFAULT_TIMEOUT
from .discovery import default_var_file, library_entry
from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "lesstheme.toml"

_PATH_FIELDS = ("library_dir", "secondary_dir", "styles_dir", "var_file", "output_path", "project_root")


class ThemeConfig(BaseModel):
    """Inputs of one theme generation run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    library_dir: Path = Field(description="Component library root (contains style/index.less)")
    styles_dir: Path = Field(description="Application styles compiled as CSS modules")
    secondary_dir: Path | None = Field(
        default=None, description="Optional second component tree (**/style/*.less)"
    )
    var_file: Path | None = Field(
        default=None, description="Variable file; defaults to style/themes/default.less"
    )
    output_path: Path | None = Field(default=None, description="Where to write the theme file")
    src_alias: str = Field(default="@", description="Import alias prefix (~<alias>/...)")
    resolve_path: str = Field(default="src/", description="Directory the alias points to")
    scoped_name: str | Callable[[str, str], str] | None = Field(
        default=None, description="CSS-module class name pattern or generator"
    )
    strict_color_only: bool = Field(
        default=False, description="Keep only declarations holding a known theme color"
    )
    project_root: Path | None = Field(
        default=None, description="Base for resolve_path (defaults to the working directory)"
    )
    lessc: str | None = Field(default=None, description="Path to the lessc binary")
    compiler_plugins: list[str] = Field(
        default_factory=list, description='lessc plugin flags, e.g. "npm-import=prefix=~"'
    )
    compile_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    @property
    def entry_file(self) -> Path:
        return library_entry(self.library_dir)

    @property
    def variables_file(self) -> Path:
        return self.var_file or default_var_file(self.library_dir)

    @property
    def root(self) -> Path:
        return self.project_root or Path.cwd()


def _resolve_paths(data: dict[str, Any], base: Path) -> dict[str, Any]:
    resolved = dict(data)
    for key in _PATH_FIELDS:
        value = resolved.get(key)
        if value is not None:
            path = Path(value).expanduser()
            resolved[key] = path if path.is_absolute() else base / path
    return resolved


def parse_config(data: dict[str, Any], base: Path | None = None) -> ThemeConfig:
    """Validate raw option data into a :class:`ThemeConfig`."""
    if base is not None:
        data = _resolve_paths(data, base)
    try:
        return ThemeConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid theme configuration: {e}") from e


def load_config(path: Path, **overrides: Any) -> ThemeConfig:
    """Load configuration from ``lesstheme.toml`` or ``pyproject.toml``.

    Keyword ``overrides`` that are not None replace file values.

    Raises:
        ConfigError: If the file is missing, not valid TOML, or invalid.
    """
    if path.is_dir():
        path = path / CONFIG_FILE
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("lesstheme", {})
        if not data:
            logger.warning("No [tool.lesstheme] table in %s", path)

    data.update({k: v for k, v in overrides.items() if v is not None})
    return parse_config(data, base=path.parent.resolve())
