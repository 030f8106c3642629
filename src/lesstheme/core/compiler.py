"""
LESS compiler adapter.

Runs the ``lessc`` command-line compiler (from the ``less`` npm package)
on in-memory source. Inline JavaScript is enabled because palette shades
are computed by the library's ``colorPalette`` JavaScript function.

Usage::

    from lesstheme.core.compiler import LessCompiler

    css = LessCompiler().render(source, [Path("node_modules/antd/lib/style")])

The binary is looked up in this order: explicit path, ``LESSTHEME_LESSC``,
``lessc`` on ``PATH``, ``./node_modules/.bin/lessc``.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .errors import CompileError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0


class StylesheetCompiler(Protocol):
    """Compiles stylesheet-language source text to CSS."""

    def render(
        self,
        source: str,
        paths: Sequence[Path],
        *,
        filename: Path | None = None,
    ) -> str: ...


def get_lessc_binary(explicit: str | Path | None = None) -> Path | None:
    """Find the lessc executable, or None if it is not installed."""
    if explicit:
        return Path(explicit)

    from_env = os.environ.get("LESSTHEME_LESSC")
    if from_env:
        return Path(from_env)

    on_path = shutil.which("lessc")
    if on_path:
        return Path(on_path)

    local = Path.cwd() / "node_modules" / ".bin" / "lessc"
    if local.exists():
        return local
    return None


class LessCompiler:
    """:class:`StylesheetCompiler` backed by the ``lessc`` CLI."""

    def __init__(
        self,
        binary: str | Path | None = None,
        *,
        plugins: Sequence[str] = (),
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._binary = binary
        self.plugins = list(plugins)
        self.timeout = timeout

    def command(self, paths: Sequence[Path]) -> list[str]:
        binary = get_lessc_binary(self._binary)
        if binary is None:
            raise CompileError(
                "lessc not found. Install it with: npm install -g less "
                "(or set LESSTHEME_LESSC)"
            )
        cmd = [str(binary), "--js"]
        if paths:
            cmd.append("--include-path=" + os.pathsep.join(str(p) for p in paths))
        cmd.extend(f"--{plugin}" for plugin in self.plugins)
        cmd.append("-")
        return cmd

    def render(
        self,
        source: str,
        paths: Sequence[Path],
        *,
        filename: Path | None = None,
    ) -> str:
        search_paths = list(paths)
        if filename is not None:
            search_paths.insert(0, filename.parent)
        cmd = self.command(search_paths)
        label = str(filename) if filename else "<stdin>"
        logger.debug("Compiling %s (%d chars)", label, len(source))

        try:
            result = subprocess.run(
                cmd,
                input=source,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CompileError(f"lessc timed out after {self.timeout}s on {label}") from e
        except FileNotFoundError as e:
            raise CompileError(f"lessc not found at {cmd[0]}") from e

        if result.returncode != 0:
            raise CompileError(
                f"lessc failed on {label}: {result.stderr.strip()}",
                stderr=result.stderr,
            )
        return result.stdout


def render_less_content(
    text: str,
    paths: Sequence[Path],
    compiler: StylesheetCompiler | None = None,
) -> str:
    """Compile LESS text to CSS with the default compiler."""
    return (compiler or LessCompiler()).render(text, paths)
