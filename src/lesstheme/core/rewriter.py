"""
Literal-to-symbol rewriting and theme document assembly.

Concrete colors in the reduced CSS are replaced by the variable (or
palette expression) they were compiled from, so the emitted file stays
re-themeable. Replacement works token by token on declaration values:
only whole hex tokens and whole ``rgb()/rgba()/hsl()/hsla()`` calls
that exactly match a compiled color are substituted.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import tinycss2

from .palette import ColorTable
from .stylesheet import Stylesheet

COLOR_FUNCTIONS = frozenset({"rgb", "rgba", "hsl", "hsla"})


class SymbolicRewriter:
    """Style pass replacing compiled color literals with their symbols."""

    def __init__(self, table: ColorTable) -> None:
        self.table = table

    def rewrite_value(self, value: str) -> str:
        tokens = tinycss2.parse_component_value_list(value)
        return "".join(self._rewrite_token(token) for token in tokens).strip()

    def _rewrite_token(self, token) -> str:
        if token.type == "hash":
            symbol = self.table.symbol_for("#" + token.value)
            return symbol if symbol is not None else token.serialize()
        if token.type == "function":
            if token.lower_name in COLOR_FUNCTIONS:
                symbol = self.table.symbol_for(token.serialize())
                if symbol is not None:
                    return symbol
            inner = "".join(self._rewrite_token(arg) for arg in token.arguments)
            return f"{token.name}({inner})"
        return token.serialize()

    def __call__(self, sheet: Stylesheet) -> None:
        for rule in sheet.walk_rules():
            for decl in rule.declarations:
                decl.value = self.rewrite_value(decl.value)


def strip_declarations(text: str, names: Iterable[str]) -> str:
    """Remove every ``<name>: <value>;`` declaration of ``names`` from LESS text."""
    for name in names:
        pattern = re.compile(
            r"[ \t]*(?<![\w@{-])" + re.escape(name) + r"[ \t]*:[^;\n]*;[ \t]*\n?"
        )
        text = pattern.sub("", text)
    return text


@dataclass(frozen=True)
class ThemeDocument:
    """The generated theme file.

    ``declarations`` lists the canonical variable declarations emitted at
    the top of ``text``, in declaration order.
    """

    text: str
    content_hash: str
    declarations: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        return self.text


def assemble_theme(
    declarations: Sequence[tuple[str, str]],
    variables_less: str,
    css: str,
) -> str:
    """Lay out the theme file.

    Order: one ``<name>: <value>;`` line per working variable (declaration
    order), then the variable source with those variables' own
    declarations removed, then the symbolic color-only CSS.
    """
    header = "".join(f"{name}: {value};\n" for name, value in declarations)
    body = strip_declarations(variables_less, (name for name, _value in declarations))
    return f"{header}{body}\n{css}"
