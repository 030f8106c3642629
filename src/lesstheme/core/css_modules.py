"""
CSS-module output for the application's own styles.

Each ``*.less`` file under the styles directory is compiled on its own and
its class selectors are renamed with a scoped-name strategy, the way a
CSS-modules build would name them. A file that fails to compile
contributes nothing; the other files are unaffected.

Scoped names are produced by either a callable ``(local, filename) -> str``
or a pattern string with ``[name]`` (file stem), ``[local]`` (class name)
and ``[hash]`` placeholders, e.g. ``"[name]__[local]___[hash]"``. The
default keeps class names unchanged.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable
from pathlib import Path

import tinycss2

from .bundler import rewrite_alias_imports
from .compiler import StylesheetCompiler
from .discovery import discover_module_styles
from .errors import CompileError, SourceError
from .stylesheet import parse_stylesheet

logger = logging.getLogger(__name__)

ScopedNameGenerator = Callable[[str, str], str]


def identity_scoped_name(local: str, filename: str) -> str:
    return local


def pattern_scoped_name(pattern: str) -> ScopedNameGenerator:
    """Build a scoped-name generator from a ``[name]/[local]/[hash]`` pattern."""

    def generate(local: str, filename: str) -> str:
        digest = hashlib.sha256(f"{filename}:{local}".encode()).hexdigest()[:5]
        return (
            pattern.replace("[name]", Path(filename).stem)
            .replace("[local]", local)
            .replace("[hash]", digest)
        )

    return generate


def resolve_scoped_name(strategy: str | ScopedNameGenerator | None) -> ScopedNameGenerator:
    if strategy is None:
        return identity_scoped_name
    if isinstance(strategy, str):
        return pattern_scoped_name(strategy)
    return strategy


def _scope_tokens(tokens: list, generate: ScopedNameGenerator, filename: str) -> str:
    out: list[str] = []
    after_dot = False
    for token in tokens:
        if token.type == "function" and token.lower_name in ("global", "local"):
            # Drop the pseudo-class colon along with the wrapper.
            if out and out[-1] == ":":
                out.pop()
            if token.lower_name == "global":
                out.append(tinycss2.serialize(token.arguments))
            else:
                out.append(_scope_tokens(token.arguments, generate, filename))
            after_dot = False
            continue
        if token.type == "function":
            out.append(f"{token.name}({_scope_tokens(token.arguments, generate, filename)})")
            after_dot = False
            continue
        if after_dot and token.type == "ident":
            out.append(generate(token.value, filename))
        else:
            out.append(token.serialize())
        after_dot = token.type == "literal" and token.value == "."
    return "".join(out)


def scope_selector(selector: str, generate: ScopedNameGenerator, filename: str) -> str:
    """Rename every class in ``selector`` except those inside ``:global(...)``.

    ``:global`` and ``:local`` wrappers are removed from the output.
    """
    tokens = tinycss2.parse_component_value_list(selector)
    scoped = _scope_tokens(tokens, generate, filename)
    return scoped.strip()


def scope_css(css: str, generate: ScopedNameGenerator, filename: str) -> str:
    sheet = parse_stylesheet(css)
    for rule in sheet.walk_rules():
        rule.selector = scope_selector(rule.selector, generate, filename)
    return sheet.serialize()


def get_css_modules_styles(
    styles_dir: Path,
    library_dir: Path,
    compiler: StylesheetCompiler,
    *,
    scoped_name: str | ScopedNameGenerator | None = None,
    src_alias: str = "@",
    resolve_path: str = "src/",
    root: Path | None = None,
) -> str:
    """Compile and scope every LESS file under ``styles_dir``.

    Returns the concatenated CSS of all files that compiled.
    """
    generate = resolve_scoped_name(scoped_name)
    base = (root or Path.cwd()) / resolve_path
    fragments: list[str] = []

    for path in discover_module_styles(styles_dir):
        try:
            source = path.read_text(encoding="utf-8")
            source = rewrite_alias_imports(source, src_alias, base)
            css = compiler.render(source, [styles_dir, library_dir], filename=path.resolve())
        except (CompileError, SourceError, OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping CSS module %s: %s", path, e)
            fragments.append("\n")
            continue
        fragments.append(scope_css(css, generate, str(path)))

    return "\n".join(fragments)
