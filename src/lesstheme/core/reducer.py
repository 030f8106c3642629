"""
Color-only reduction of compiled CSS.

Removes every declaration that is not related to color, then every rule
left empty. For example::

    .body {
      font-family: 'Lato';
      background: #ccc;
      color: #000;
      padding: 0;
    }

becomes::

    .body {
      background: #ccc;
      color: #000;
    }

At-rules (``@keyframes``, ``@font-face`` ...) are kept; rules nested in
``@media``/``@keyframes`` blocks are reduced like top-level rules.
"""

from __future__ import annotations

from collections.abc import Iterable

from .colors import find_hex_literal, normalize_color
from .stylesheet import Declaration, Rule, Stylesheet

# Internal palette preview classes of the component library docs.
PALETTE_PREVIEW_SELECTOR = ".main-color .palatte-"

COLOR_PROPERTY_KEYWORDS = ("color", "background", "border", "box-shadow")


class RuleReducer:
    """Style pass that strips non-color declarations.

    In strict mode a declaration survives only if it carries a hex
    literal that belongs to ``color_set`` (``background-size`` is always
    kept). In relaxed mode the property name decides, and ``background*``
    properties additionally need a ``#`` literal in their value.
    """

    def __init__(self, color_set: Iterable[str] = (), *, strict: bool = False) -> None:
        self.color_set = frozenset(normalize_color(c) for c in color_set)
        self.strict = strict

    def keeps(self, decl: Declaration) -> bool:
        if self.strict:
            return self._contains_known_color(decl)
        name = decl.name.lower()
        if not any(keyword in name for keyword in COLOR_PROPERTY_KEYWORDS):
            return False
        if "background" in name and "#" not in decl.value:
            return False
        return True

    def _contains_known_color(self, decl: Declaration) -> bool:
        literal = find_hex_literal(decl.value)
        if literal is None:
            return "background-size" in decl.name.lower()
        return normalize_color(literal) in self.color_set

    def _clean_rule(self, rule: Rule) -> bool:
        if rule.selector.startswith(PALETTE_PREVIEW_SELECTOR):
            return False
        rule.declarations = [decl for decl in rule.declarations if self.keeps(decl)]
        return bool(rule.declarations)

    def __call__(self, sheet: Stylesheet) -> None:
        sheet.filter_rules(self._clean_rule)
