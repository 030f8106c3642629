"""
LESS source bundling and import path rewriting.

``bundle_less`` flattens a variable file by inlining its local
``@import`` statements, so the result can be prepended to any document
without relying on the compiler's search paths.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .errors import SourceError

logger = logging.getLogger(__name__)

_IMPORT_RE = re.compile(
    r"^[ \t]*@import\s+(?:\([^)]*\)\s*)?([\"'])([^\"']+)\1\s*;[ \t]*$",
    re.MULTILINE,
)


def _is_external(target: str) -> bool:
    """Imports the bundler leaves for the compiler to resolve."""
    return (
        target.startswith(("~", "http://", "https://", "//", "url("))
        or target.endswith(".css")
    )


def _resolve_import(target: str, importer: Path) -> Path:
    path = (importer.parent / target).resolve()
    if path.suffix != ".less" and not path.exists():
        path = path.with_name(path.name + ".less")
    return path


def bundle_less(path: Path) -> str:
    """Return the contents of ``path`` with local imports inlined.

    Every file is inlined at most once; a repeated import is dropped.

    Raises:
        SourceError: If ``path`` or one of its local imports cannot be read.
    """
    return _bundle(path.resolve(), seen=set())


def _bundle(path: Path, seen: set[Path]) -> str:
    seen.add(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"Cannot read {path}: {e}") from e

    def inline(match: re.Match[str]) -> str:
        target = match.group(2)
        if _is_external(target):
            return match.group(0)
        resolved = _resolve_import(target, path)
        if resolved in seen:
            logger.debug("Already bundled %s", resolved)
            return ""
        if not resolved.exists():
            raise SourceError(f"Import {target!r} in {path} not found")
        return _bundle(resolved, seen)

    return _IMPORT_RE.sub(inline, content)


def rewrite_alias_imports(content: str, alias: str, base: Path) -> str:
    """Point ``@import "~<alias>/..."`` statements at ``base``.

    Example::

        @import "~@/styles/vars.less";  ->  @import "/app/src/styles/vars.less";
    """
    pattern = re.compile(r"@import +([\"'])~(" + re.escape(alias) + r")/")
    prefix = base.as_posix().rstrip("/") + "/"
    return pattern.sub(lambda m: f"@import {m.group(1)}{prefix}", content)
