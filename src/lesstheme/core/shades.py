"""
Palette shade expressions.

Builds the LESS expression that derives a tint/shade of a palette
variable at compile time, e.g.::

    @primary-1  ->  color(~`colorPalette("@{primary-color}", 1)`)
    @link-color-3  ->  color(~`colorPalette("@{link-color}", 3)`)

The expression is text only; the LESS compiler evaluates it later.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

PRIMARY_COLOR = "@primary-color"

# Index 6 is the base color itself, so it is never probed.
SHADE_INDICES: tuple[int, ...] = (1, 2, 3, 4, 5, 7)
PRIMARY_SHADE_INDICES: tuple[int, ...] = (1, 2, 3, 4, 5, 7, 8, 9, 10)

_SHADE_NAME_RE = re.compile(r"^(@?[\w-]+?)-(\d+)$")


def is_shade_name(name: str) -> bool:
    """True if ``name`` has the ``<base>-<index>`` shape."""
    return bool(_SHADE_NAME_RE.match(name))


def split_shade_name(name: str) -> tuple[str, int]:
    """Split ``@base-3`` into ``("@base", 3)``."""
    match = _SHADE_NAME_RE.match(name)
    if not match:
        raise ValueError(f"Not a shade name: {name!r}")
    return match.group(1), int(match.group(2))


class ShadeExpressionBuilder:
    """Builds ``colorPalette`` expressions for palette shade names.

    Names whose base belongs to one of ``primary_families`` always
    derive from ``primary_variable``, whatever suffix followed the family.
    """

    def __init__(
        self,
        primary_variable: str = PRIMARY_COLOR,
        primary_families: Iterable[str] = ("primary",),
    ) -> None:
        self.primary_variable = primary_variable
        self.primary_families = tuple(f.lstrip("@") for f in primary_families)

    def is_primary(self, base: str) -> bool:
        return base.lstrip("@") in self.primary_families

    def target(self, name: str) -> str:
        """Return the variable a shade name derives from."""
        base, _index = split_shade_name(name)
        if self.is_primary(base):
            return self.primary_variable
        return base if base.startswith("@") else f"@{base}"

    def build(self, name: str) -> str:
        _base, index = split_shade_name(name)
        target = self.target(name).lstrip("@")
        return 'color(~`colorPalette("@{' + target + '}", ' + str(index) + ")`)"

    def shade_name(self, variable: str, index: int) -> str:
        """Probe token for shade ``index`` of ``variable``."""
        if variable == self.primary_variable:
            return f"@{self.primary_families[0]}-{index}"
        return f"{variable}-{index}"

    def indices(self, variable: str) -> tuple[int, ...]:
        if variable == self.primary_variable:
            return PRIMARY_SHADE_INDICES
        return SHADE_INDICES


_default_builder = ShadeExpressionBuilder()


def build_shade(name: str) -> str:
    """Build the shade expression for ``name`` with the default primary family."""
    return _default_builder.build(name)
