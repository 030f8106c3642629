"""
Minimal style AST for compiled CSS.

Compiled CSS is parsed with tinycss2 into rules, declarations and
at-rules, transformed by an ordered list of passes, and serialized back
to text. Comments are dropped while parsing.

Usage::

    from lesstheme.core.stylesheet import process

    css = process(css, [RuleReducer(color_set), rewriter])
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Protocol

import tinycss2

logger = logging.getLogger(__name__)

# At-rules whose block holds a list of qualified rules.
RULE_LIST_AT_RULES = frozenset(
    {"media", "supports", "document", "keyframes", "layer", "container", "scope"}
)


@dataclass
class Declaration:
    """A single ``name: value`` declaration."""

    name: str
    value: str
    important: bool = False

    def serialize(self) -> str:
        suffix = " !important" if self.important else ""
        return f"{self.name}: {self.value}{suffix};"


@dataclass
class Rule:
    """A qualified rule: selector plus declarations."""

    selector: str
    declarations: list[Declaration] = field(default_factory=list)

    def serialize(self, indent: str = "") -> str:
        lines = [f"{indent}{self.selector} {{"]
        lines.extend(f"{indent}  {decl.serialize()}" for decl in self.declarations)
        lines.append(f"{indent}}}")
        return "\n".join(lines)


@dataclass
class AtRule:
    """An at-rule.

    Rule-list at-rules (``@media``, ``@keyframes`` ...) keep their nested
    rules in ``children``; any other block is kept verbatim in ``block``.
    """

    keyword: str
    prelude: str = ""
    children: list[Node] | None = None
    block: str | None = None

    def serialize(self, indent: str = "") -> str:
        head = f"{indent}@{self.keyword}"
        if self.prelude:
            head += f" {self.prelude}"
        if self.children is not None:
            inner = [child.serialize(indent + "  ") for child in self.children]
            return "\n".join([f"{head} {{", *inner, f"{indent}}}"])
        if self.block is not None:
            return f"{head} {{{self.block}}}"
        return f"{head};"


Node = Rule | AtRule


class StylePass(Protocol):
    """A transform applied to a parsed stylesheet in place."""

    def __call__(self, sheet: Stylesheet) -> None: ...


@dataclass
class Stylesheet:
    nodes: list[Node] = field(default_factory=list)

    def walk_rules(self) -> Iterator[Rule]:
        """Yield every rule, including rules nested in at-rules."""
        yield from _walk(self.nodes)

    def filter_rules(self, keep: Callable[[Rule], bool]) -> None:
        """Remove every rule (at any depth) for which ``keep`` is False."""
        self.nodes = _filter(self.nodes, keep)

    def serialize(self) -> str:
        return "\n".join(node.serialize() for node in self.nodes) + "\n"


def _walk(nodes: list[Node]) -> Iterator[Rule]:
    for node in nodes:
        if isinstance(node, Rule):
            yield node
        elif node.children is not None:
            yield from _walk(node.children)


def _filter(nodes: list[Node], keep: Callable[[Rule], bool]) -> list[Node]:
    kept: list[Node] = []
    for node in nodes:
        if isinstance(node, Rule):
            if keep(node):
                kept.append(node)
            continue
        if node.children is not None:
            node.children = _filter(node.children, keep)
        kept.append(node)
    return kept


def _unprefixed(keyword: str) -> str:
    """``-webkit-keyframes`` -> ``keyframes``."""
    if keyword.startswith("-"):
        parts = keyword.split("-", 2)
        if len(parts) == 3:
            return parts[2]
    return keyword


def _parse_declarations(content: list) -> list[Declaration]:
    declarations: list[Declaration] = []
    for item in tinycss2.parse_blocks_contents(content, skip_comments=True, skip_whitespace=True):
        if item.type == "declaration":
            declarations.append(
                Declaration(
                    name=item.name,
                    value=tinycss2.serialize(item.value).strip(),
                    important=item.important,
                )
            )
        elif item.type == "error":
            logger.debug("Skipping malformed declaration: %s", item.message)
    return declarations


def _parse_nodes(items: list) -> list[Node]:
    nodes: list[Node] = []
    for item in items:
        if item.type == "qualified-rule":
            selector = tinycss2.serialize(item.prelude).strip()
            nodes.append(Rule(selector, _parse_declarations(item.content)))
        elif item.type == "at-rule":
            prelude = tinycss2.serialize(item.prelude).strip()
            at_rule = AtRule(item.at_keyword, prelude)
            if item.content is not None:
                if _unprefixed(item.lower_at_keyword) in RULE_LIST_AT_RULES:
                    children = tinycss2.parse_rule_list(
                        item.content, skip_comments=True, skip_whitespace=True
                    )
                    at_rule.children = _parse_nodes(children)
                else:
                    at_rule.block = tinycss2.serialize(item.content)
            nodes.append(at_rule)
        elif item.type == "error":
            logger.debug("Skipping unparsable CSS: %s", item.message)
    return nodes


def parse_stylesheet(css: str) -> Stylesheet:
    """Parse compiled CSS into a :class:`Stylesheet`."""
    items = tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True)
    return Stylesheet(_parse_nodes(items))


def process(css: str, passes: Sequence[StylePass]) -> str:
    """Parse ``css``, run each pass in order, and serialize the result."""
    sheet = parse_stylesheet(css)
    for style_pass in passes:
        style_pass(sheet)
    return sheet.serialize()
