"""Version of the lesstheme distribution.

Read from the ``[project]`` table of ``pyproject.toml`` in a source checkout,
otherwise from the installed package metadata.
"""

import re
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"
_VERSION_RE = re.compile(r'^version\s*=\s*["\']([^"\']+)["\']', re.MULTILINE)


def get_version() -> str:
    """Return the lesstheme version, ``0.0.0`` when it cannot be determined."""
    if _PYPROJECT.exists():
        match = _VERSION_RE.search(_PYPROJECT.read_text(encoding="utf-8"))
        if match:
            return match.group(1)
    try:
        return _metadata_version("lesstheme")
    except PackageNotFoundError:
        return "0.0.0"
