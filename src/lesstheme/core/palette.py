"""
Probe documents and the compiled color table.

To learn which concrete color each variable (and each palette shade)
compiles to, a throwaway stylesheet assigns every token to the ``color``
property of its own selector::

    .primary-color { color: #1890ff; }
    .primary-1 { color: color(~`colorPalette("@{primary-color}", 1)`); }

After compilation the selectors are read back into a
:class:`ColorTable` mapping each token to its compiled literal.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from .colors import is_color_function, normalize_color
from .shades import ShadeExpressionBuilder, is_shade_name, split_shade_name
from .stylesheet import parse_stylesheet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeToken:
    """A symbolic token probed for its compiled color."""

    name: str
    value: str
    symbol: str
    is_shade: bool = False

    @property
    def selector(self) -> str:
        return "." + self.name.lstrip("@")


@dataclass(frozen=True)
class ColorEntry:
    name: str
    color: str
    symbol: str
    is_shade: bool = False


@dataclass
class ColorTable:
    """Token -> compiled color, in rewrite priority order.

    When two tokens compile to the same literal, the first entry wins:
    variables in declaration order come before palette shades.
    """

    entries: list[ColorEntry] = field(default_factory=list)
    _by_literal: dict[str, ColorEntry] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        for entry in self.entries:
            self._by_literal.setdefault(normalize_color(entry.color), entry)

    def add(self, entry: ColorEntry) -> None:
        self.entries.append(entry)
        self._by_literal.setdefault(normalize_color(entry.color), entry)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ColorEntry]:
        return iter(self.entries)

    def __contains__(self, name: object) -> bool:
        return any(entry.name == name for entry in self.entries)

    def color_of(self, name: str) -> str | None:
        for entry in self.entries:
            if entry.name == name:
                return entry.color
        return None

    def symbol_for(self, literal: str) -> str | None:
        entry = self._by_literal.get(normalize_color(literal))
        return entry.symbol if entry else None

    @property
    def color_set(self) -> frozenset[str]:
        return frozenset(self._by_literal)


def variable_symbol(name: str, working: Sequence[str], builder: ShadeExpressionBuilder) -> str:
    """Symbolic replacement for a variable token.

    A shade-shaped name (``@primary-1``) is replaced by its palette
    expression when the variable it derives from exists; otherwise the
    bare name is used.
    """
    if is_shade_name(name):
        base, _index = split_shade_name(name)
        if builder.is_primary(base) or base in working:
            return builder.build(name)
    return name


def build_probe_tokens(
    working: Sequence[str],
    mapping: dict[str, str],
    builder: ShadeExpressionBuilder,
) -> list[ProbeToken]:
    """Create one probe token per working variable and per palette shade.

    Shade tokens whose selector collides with a variable's selector are
    dropped, so every selector identifies exactly one token.
    """
    tokens: list[ProbeToken] = []
    selectors: set[str] = set()
    for name in working:
        token = ProbeToken(name, mapping[name], variable_symbol(name, working, builder))
        tokens.append(token)
        selectors.add(token.selector)

    for name in working:
        if is_shade_name(name):
            continue
        for index in builder.indices(name):
            shade = builder.shade_name(name, index)
            expression = builder.build(shade)
            token = ProbeToken(shade, expression, expression, is_shade=True)
            if token.selector in selectors:
                logger.debug("Shade %s shadowed by a declared variable", shade)
                continue
            tokens.append(token)
            selectors.add(token.selector)
    return tokens


def build_probe_document(variables_less: str, tokens: Sequence[ProbeToken]) -> str:
    """Assemble the probe stylesheet: variable source followed by one rule per token."""
    rules = [f"{token.selector} {{ color: {token.value}; }}" for token in tokens]
    return variables_less + "\n" + "\n".join(rules) + "\n"


def extract_color_table(css: str, tokens: Sequence[ProbeToken]) -> ColorTable:
    """Read the compiled color of every probe token from ``css``.

    Values that are not a hex literal or an rgb/hsl function are ignored.
    """
    compiled: dict[str, str] = {}
    for rule in parse_stylesheet(css).walk_rules():
        for decl in rule.declarations:
            if decl.name.lower() == "color" and is_color_function(decl.value):
                compiled[rule.selector] = decl.value

    table = ColorTable()
    for token in tokens:
        color = compiled.get(token.selector)
        if color is None:
            logger.debug("No compiled color for %s", token.name)
            continue
        table.add(ColorEntry(token.name, color, token.symbol, token.is_shade))
    return table
