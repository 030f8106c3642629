"""
Color value helpers.

Decides whether a LESS variable value is a renderable color and finds
color literals inside compiled declaration values.
"""

from __future__ import annotations

import random
import re

# A number directly followed by a length unit ("12px", "1.5rem").
_LENGTH_RE = re.compile(r"\d(?:px|r?em|vh|vw|vmin|vmax|pt|pc|cm|mm|in|ex|ch)\b", re.IGNORECASE)

# Dynamic palette functions whose result is only known at compile time.
_DYNAMIC_RE = re.compile(r"colorPalette|fade")

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_HEX_LENGTHS = (3, 4, 6, 8)

_FUNCTIONAL_RE = re.compile(
    r"^(rgb|hsl|hsv)a?\((\d+%?(deg|rad|grad|turn)?[,\s]+){2,3}[\s/]*[\d.]+%?\)$",
    re.IGNORECASE,
)

# Longest form first so "#11223344" is not reported as "#112233".
_HEX_LITERAL_PATTERNS = (
    re.compile(r"#[0-9a-fA-F]{8}"),
    re.compile(r"#[0-9a-fA-F]{6}"),
    re.compile(r"#[0-9a-fA-F]{3,4}"),
)


def is_valid_color(value: str | None) -> bool:
    """Return True if ``value`` is a color a stylesheet can render.

    Examples:
        >>> is_valid_color("#fff")
        True
        >>> is_valid_color("rgba(0, 0, 0, 0.5)")
        True
        >>> is_valid_color("20px")
        False
    """
    if not value:
        return False
    if "px" in value or _LENGTH_RE.search(value):
        return False
    if _DYNAMIC_RE.search(value):
        return True
    if value.startswith("#"):
        digits = value[1:]
        return len(digits) in _HEX_LENGTHS and all(c in _HEX_DIGITS for c in digits)
    return bool(_FUNCTIONAL_RE.match(value))


def find_hex_literal(value: str) -> str | None:
    """Return the first hex color literal in ``value``, preferring longer forms."""
    for pattern in _HEX_LITERAL_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(0)
    return None


def is_color_function(value: str) -> bool:
    """True for compiled color values: hex literals or rgb/hsl functions."""
    value = value.strip().lower()
    return value.startswith("#") or value.startswith(("rgb(", "rgba(", "hsl(", "hsla("))


def normalize_color(value: str) -> str:
    """Normalize a compiled color literal for comparison."""
    return re.sub(r"\s+", "", value).lower()


def random_color() -> str:
    """Return a random 6-digit hex color."""
    return f"#{random.randrange(0x1000000):06x}"
