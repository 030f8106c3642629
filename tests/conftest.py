"""Shared pytest fixtures for lesstheme tests."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest
import tinycss2

from lesstheme.core.cache import ContentCache
from lesstheme.core.config import ThemeConfig
from lesstheme.core.errors import CompileError

_IMPORT_RE = re.compile(
    r"^[ \t]*@import\s+(?:\([^)]*\)\s*)?([\"'])([^\"']+)\1\s*;[ \t]*$", re.MULTILINE
)
_VAR_DEF_RE = re.compile(r"^[ \t]*(@[\w-]+)[ \t]*:[ \t]*(.+?)[ \t]*;[ \t]*$", re.MULTILINE)
_PALETTE_RE = re.compile(
    r"color\(~`colorPalette\(\s*['\"]@\{([\w-]+)\}['\"]\s*,\s*(\d+)\s*\)\s*`\)"
)
_REF_RE = re.compile(r"@([\w-]+)")


def fake_shade(base: str, index: int) -> str:
    """Deterministic stand-in for the library's colorPalette function.

    Indices below 6 mix toward white, indices above 6 toward black.
    Non-hex bases are returned unchanged.
    """
    digits = base.strip().lstrip("#")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    if not base.strip().startswith("#") or len(digits) != 6:
        return base
    rgb = [int(digits[i : i + 2], 16) for i in (0, 2, 4)]
    if index < 6:
        target, weight = 255, (6 - index) * 0.15
    else:
        target, weight = 0, (index - 6) * 0.15
    mixed = [round(c + (target - c) * weight) for c in rgb]
    return "#" + "".join(f"{c:02x}" for c in mixed)


class FakeLessCompiler:
    """In-process compiler covering the LESS subset used by the tests.

    Supports ``@import`` inlining (each file once), flat variable
    definitions and references, and ``colorPalette`` shade expressions.
    A declaration that still references a variable after evaluation is
    reported as an undefined variable, like lessc does.
    """

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.sources: list[str] = []

    def render(
        self,
        source: str,
        paths: Sequence[Path],
        *,
        filename: Path | None = None,
    ) -> str:
        self.sources.append(source)
        if self.fail_on is not None and self.fail_on in source:
            raise CompileError(f"fake lessc rejected source containing {self.fail_on!r}")

        search = [Path(p) for p in paths]
        if filename is not None:
            search.insert(0, filename.parent)
        text = self._inline(source, search, set())

        variables = {m.group(1): m.group(2) for m in _VAR_DEF_RE.finditer(text)}
        body = _VAR_DEF_RE.sub("", text)
        return self._format(self._evaluate(body, variables))

    def _candidates(self, target: str, paths: Sequence[Path]):
        names = [target] if target.endswith(".less") else [target, target + ".less"]
        for name in names:
            candidate = Path(name)
            if candidate.is_absolute():
                yield candidate
            else:
                for base in paths:
                    yield base / name

    def _inline(self, source: str, paths: Sequence[Path], seen: set[Path]) -> str:
        def replace(match: re.Match[str]) -> str:
            target = match.group(2)
            if target.startswith("~") or target.endswith(".css"):
                return ""
            for candidate in self._candidates(target, paths):
                if candidate.is_file():
                    resolved = candidate.resolve()
                    if resolved in seen:
                        return ""
                    seen.add(resolved)
                    content = resolved.read_text(encoding="utf-8")
                    return self._inline(content, [resolved.parent, *paths], seen)
            raise CompileError(f"'{target}' wasn't found")

        return _IMPORT_RE.sub(replace, source)

    def _evaluate(self, text: str, variables: dict[str, str], depth: int = 0) -> str:
        if depth > 20:
            raise CompileError("Recursive variable definition")

        def palette(match: re.Match[str]) -> str:
            base = self._evaluate("@" + match.group(1), variables, depth + 1)
            return fake_shade(base, int(match.group(2)))

        def reference(match: re.Match[str]) -> str:
            name = "@" + match.group(1)
            if name not in variables:
                return match.group(0)
            return self._evaluate(variables[name], variables, depth + 1)

        text = _PALETTE_RE.sub(palette, text)
        return _REF_RE.sub(reference, text)

    def _format(self, css: str) -> str:
        out: list[str] = []
        for item in tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True):
            if item.type == "qualified-rule":
                decls = [
                    d
                    for d in tinycss2.parse_blocks_contents(
                        item.content, skip_comments=True, skip_whitespace=True
                    )
                    if d.type == "declaration"
                ]
                if not decls:
                    continue
                lines = [tinycss2.serialize(item.prelude).strip() + " {"]
                for decl in decls:
                    value = tinycss2.serialize(decl.value).strip()
                    undefined = _REF_RE.search(value)
                    if undefined:
                        message = f"NameError: variable {undefined.group(0)} is undefined"
                        raise CompileError(message, stderr=message)
                    important = " !important" if decl.important else ""
                    lines.append(f"  {decl.name}: {value}{important};")
                lines.append("}")
                out.append("\n".join(lines))
            elif item.type == "at-rule" and item.lower_at_keyword != "import":
                out.append(tinycss2.serialize([item]).strip())
        return "\n".join(out) + "\n"


@pytest.fixture
def fake_compiler() -> FakeLessCompiler:
    return FakeLessCompiler()


@pytest.fixture
def make_compiler() -> Callable[..., FakeLessCompiler]:
    return FakeLessCompiler


@pytest.fixture
def write_tree() -> Callable[[Path, dict[str, str]], Path]:
    """Write ``{relative_path: content}`` below a root directory."""

    def write(root: Path, files: dict[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return write


LIBRARY_FILES = {
    "lib/style/index.less": (
        '@import "./themes/default.less";\n'
        "\n"
        "body {\n"
        "  color: @text-color;\n"
        "  font-size: @font-size-base;\n"
        "  background: @body-background;\n"
        "  margin: 0;\n"
        "}\n"
    ),
    "lib/style/color/colors.less": "@blue-6: #1890ff;\n",
    "lib/style/themes/default.less": (
        '@import "../color/colors.less";\n'
        "\n"
        "@primary-color: @blue-6;\n"
        "@link-color: @primary-color;\n"
        "@text-color: rgba(0, 0, 0, 0.85);\n"
        "@body-background: #fff;\n"
        "@border-color-base: #d9d9d9;\n"
        "@font-size-base: 14px;\n"
        "@primary-1: color(~`colorPalette('@{primary-color}', 1) `);\n"
    ),
    "lib/button/style/index.less": (
        '@import "../../style/themes/default.less";\n'
        "\n"
        ".ant-btn {\n"
        "  color: @primary-color;\n"
        "  padding: 4px 15px;\n"
        "  border: 1px solid @border-color-base;\n"
        "  background-color: @primary-1;\n"
        "}\n"
        ".ant-btn:hover {\n"
        "  color: @link-color;\n"
        "}\n"
        ".main-color .palatte-blue-1 {\n"
        "  background: #e6f7ff;\n"
        "}\n"
    ),
    "src/styles/app.less": (
        '@import "~@/styles/theme.less";\n'
        "\n"
        ".header {\n"
        "  border-color: @primary-color;\n"
        "  margin: 0;\n"
        "}\n"
    ),
    "src/styles/theme.less": "@primary-color: #1890ff;\n",
    "src/styles/broken.less": ".broken {\n  color: @undefined-color;\n}\n",
}


@pytest.fixture
def library_project(tmp_path: Path, write_tree) -> Path:
    """A small component library plus application styles below ``tmp_path``."""
    return write_tree(tmp_path, LIBRARY_FILES)


@pytest.fixture
def theme_config(library_project: Path) -> ThemeConfig:
    return ThemeConfig(
        library_dir=library_project / "lib",
        styles_dir=library_project / "src" / "styles",
        project_root=library_project,
    )


@pytest.fixture
def cache() -> ContentCache:
    return ContentCache()
