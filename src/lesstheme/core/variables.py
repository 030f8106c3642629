"""
LESS variable resolution.

Turns raw variable definitions into a flat name -> color mapping,
following alias chains such as::

    @primary-color: #1890ff;
    @link-color: @primary-color;

    @link-color -> @primary-color -> #1890ff

Lines that cannot be parsed, or whose value is not a color, are skipped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from pathlib import Path

from .colors import is_valid_color
from .errors import CyclicAliasError, SourceError

logger = logging.getLogger(__name__)

# "@name: value;" with an optional quoted/hyphenated name.
_DEFINITION_RE = re.compile(r"^(@[\w'\"-]+)\s*:\s*(.*?)\s*;")

_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT_RE = re.compile(r"(?<![:\"'])//[^\n]*")
_DECLARED_RE = re.compile(r"^\s*(@[\w'\"-]+)\s*:\s*([^;]*);", re.MULTILINE)

ColorMapping = dict[str, str]


def _clean_name(name: str) -> str:
    return name.replace("'", "").replace('"', "").strip()


def scan_definition(line: str) -> tuple[str, str] | None:
    """Extract ``(name, raw_value)`` from a single definition line.

    Returns None for anything that is not a variable definition, so the
    caller can skip it and continue.
    """
    if not line.startswith("@") or ":" not in line:
        return None
    match = _DEFINITION_RE.match(line)
    if not match:
        return None
    name, value = match.groups()
    name = _clean_name(name)
    if len(name) < 2 or not value:
        return None
    return name, value


def iter_definitions(content: str) -> Iterator[tuple[str, str]]:
    """Yield raw ``(name, value)`` definitions in source order."""
    for line in content.split("\n"):
        definition = scan_definition(line)
        if definition is not None:
            yield definition


def resolve_alias(name: str, mapping: ColorMapping) -> str | None:
    """Follow an alias chain through ``mapping`` until it reaches a value
    that is not itself a key.

    Returns None when ``name`` is not in the mapping at all.

    Raises:
        CyclicAliasError: If the chain visits the same name twice.
    """
    chain = [name]
    value = mapping.get(name)
    while value is not None and value in mapping:
        if value in chain:
            raise CyclicAliasError(chain + [value])
        chain.append(value)
        value = mapping[value]
    return value


def generate_color_map(content: str) -> ColorMapping:
    """Build the variable -> color mapping for a LESS source.

    Aliases are resolved against the definitions seen so far, so a
    variable must be defined before it is referenced.
    """
    mapping: ColorMapping = {}
    for name, value in iter_definitions(content):
        if value.startswith("@"):
            try:
                value = resolve_alias(value, mapping)
            except CyclicAliasError as e:
                logger.warning("Skipping %s: %s", name, e)
                continue
        if is_valid_color(value):
            mapping[name] = value
    return mapping


def read_less_vars(content: str) -> dict[str, str]:
    """Return every variable declared in ``content`` with its raw value.

    Unlike :func:`generate_color_map` nothing is resolved or validated;
    this lists what a variable file declares, in declaration order.
    """
    content = _BLOCK_COMMENT_RE.sub("", content)
    content = _LINE_COMMENT_RE.sub("", content)
    variables: dict[str, str] = {}
    for match in _DECLARED_RE.finditer(content):
        name = _clean_name(match.group(1))
        variables[name] = match.group(2).strip()
    return variables


def load_less_vars(path: Path) -> dict[str, str]:
    """Read a LESS file and return its declared variables."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"Cannot read variable file {path}: {e}") from e
    return read_less_vars(content)
