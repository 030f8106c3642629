"""
Theme file generation.

Builds a color-only LESS theme file from a component library and the
application's own styles:

1. combine the library entry stylesheet with every component stylesheet;
2. resolve the theme variables and compile a probe document to learn the
   concrete color of every variable and palette shade;
3. compile the full source, keep only color declarations, and turn the
   concrete colors back into variable references.

The resulting file can be loaded in the browser and recompiled with new
variable values to switch themes at runtime.

Usage::

    from lesstheme import ThemeConfig, generate_theme

    doc = generate_theme(ThemeConfig(library_dir=..., styles_dir=...))
    print(doc.text)
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from .bundler import bundle_less
from .cache import ContentCache, content_hash, get_content_cache
from .compiler import LessCompiler, StylesheetCompiler
from .config import ThemeConfig
from .css_modules import get_css_modules_styles
from .discovery import discover_component_styles, discover_secondary_styles, less_search_paths
from .errors import SourceError
from .palette import (
    ColorTable,
    ProbeToken,
    build_probe_document,
    build_probe_tokens,
    extract_color_table,
)
from .reducer import RuleReducer
from .rewriter import SymbolicRewriter, ThemeDocument, assemble_theme
from .shades import PRIMARY_COLOR, ShadeExpressionBuilder
from .stylesheet import process
from .variables import generate_color_map, read_less_vars

logger = logging.getLogger(__name__)


class PipelineStage(StrEnum):
    IDLE = "idle"
    BUILDING_SOURCE = "building_source"
    RESOLVING_PALETTE = "resolving_palette"
    COMPILING_PROBE = "compiling_probe"
    EXTRACTING_COLOR_TABLE = "extracting_color_table"
    COMPILING_FULL = "compiling_full"
    REDUCING = "reducing"
    REWRITING = "rewriting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineContext:
    """State of a single generation run."""

    config: ThemeConfig
    compiler: StylesheetCompiler
    builder: ShadeExpressionBuilder = field(default_factory=ShadeExpressionBuilder)
    stage: PipelineStage = PipelineStage.IDLE
    content: str = ""
    key: str = ""
    variables_less: str = ""
    mapping: dict[str, str] = field(default_factory=dict)
    working: list[str] = field(default_factory=list)
    tokens: list[ProbeToken] = field(default_factory=list)
    table: ColorTable = field(default_factory=ColorTable)
    css: str = ""

    def advance(self, stage: PipelineStage) -> None:
        logger.debug("Theme pipeline: %s -> %s", self.stage, stage)
        self.stage = stage

    @property
    def search_paths(self) -> list[Path]:
        return less_search_paths(
            self.config.library_dir, self.config.styles_dir, self.config.secondary_dir
        )


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"Cannot read {path}: {e}") from e


def build_source(config: ThemeConfig) -> str:
    """Library entry stylesheet followed by one import per component stylesheet."""
    content = _read(config.entry_file) + "\n"
    styles = discover_component_styles(config.library_dir)
    styles += discover_secondary_styles(config.secondary_dir)
    for style in styles:
        content += f'@import "{style.as_posix()}";\n'
    return content


def resolve_palette(ctx: PipelineContext) -> None:
    """Flatten the variable file and compute the working variable set."""
    var_file = ctx.config.variables_file
    declared = list(read_less_vars(_read(var_file)))
    ctx.variables_less = bundle_less(var_file)
    ctx.mapping = generate_color_map(ctx.variables_less)
    if not declared:
        declared = [PRIMARY_COLOR]
    ctx.working = [name for name in declared if name in ctx.mapping]
    logger.debug("%d of %d declared variables are colors", len(ctx.working), len(declared))


def compile_probe(ctx: PipelineContext) -> str:
    ctx.tokens = build_probe_tokens(ctx.working, ctx.mapping, ctx.builder)
    probe = build_probe_document(ctx.variables_less, ctx.tokens)
    return ctx.compiler.render(probe, ctx.search_paths)


def _module_styles(ctx: PipelineContext) -> str:
    config = ctx.config
    return get_css_modules_styles(
        config.styles_dir,
        config.library_dir,
        ctx.compiler,
        scoped_name=config.scoped_name,
        src_alias=config.src_alias,
        resolve_path=config.resolve_path,
        root=config.root,
    )


def _run_pipeline(ctx: PipelineContext) -> ThemeDocument:
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="lesstheme-modules") as pool:
        modules: Future[str] = pool.submit(_module_styles, ctx)

        ctx.advance(PipelineStage.RESOLVING_PALETTE)
        resolve_palette(ctx)

        ctx.advance(PipelineStage.COMPILING_PROBE)
        probe_css = compile_probe(ctx)

        ctx.advance(PipelineStage.EXTRACTING_COLOR_TABLE)
        ctx.table = extract_color_table(probe_css, ctx.tokens)
        logger.debug("Color table has %d entries", len(ctx.table))

        ctx.advance(PipelineStage.COMPILING_FULL)
        full_css = ctx.compiler.render(
            f"{ctx.content}\n{ctx.variables_less}", ctx.search_paths
        )
        ctx.css = f"{modules.result()}\n{full_css}"

    ctx.advance(PipelineStage.REDUCING)
    reducer = RuleReducer(ctx.table.color_set, strict=ctx.config.strict_color_only)
    css = process(ctx.css, [reducer])

    ctx.advance(PipelineStage.REWRITING)
    css = process(css, [SymbolicRewriter(ctx.table)])
    declarations = tuple((name, ctx.mapping[name]) for name in ctx.working)
    text = assemble_theme(declarations, ctx.variables_less, css)
    return ThemeDocument(text=text, content_hash=ctx.key, declarations=declarations)


def generate_theme(
    config: ThemeConfig,
    *,
    compiler: StylesheetCompiler | None = None,
    cache: ContentCache | None = None,
) -> ThemeDocument:
    """Generate the color theme file described by ``config``.

    Returns the cached document when the combined source is unchanged
    since the last successful run. The combined source is the entry
    stylesheet plus the component import lines, so edits inside an
    imported component or ``styles_dir`` file are not seen by the cache;
    pass a fresh :class:`ContentCache` to force a rebuild. Writes
    ``config.output_path`` when set.

    Raises:
        SourceError: If a source stylesheet cannot be read.
        CompileError: If the compiler rejects the probe or full document.
    """
    if compiler is None:
        compiler = LessCompiler(
            config.lessc, plugins=config.compiler_plugins, timeout=config.compile_timeout
        )
    cache = cache if cache is not None else get_content_cache()
    ctx = PipelineContext(config=config, compiler=compiler)

    try:
        ctx.advance(PipelineStage.BUILDING_SOURCE)
        ctx.content = build_source(config)
        ctx.key = content_hash(
            ctx.content,
            _read(config.variables_file),
            "strict" if config.strict_color_only else "relaxed",
        )
        document, cached = cache.fetch_or_compute(ctx.key, lambda: _run_pipeline(ctx))
    except Exception:
        logger.error("Theme generation failed during %s", ctx.stage)
        ctx.advance(PipelineStage.FAILED)
        raise

    if cached:
        logger.info("Theme source unchanged, using cached theme")
    ctx.advance(PipelineStage.DONE)

    if config.output_path:
        config.output_path.parent.mkdir(parents=True, exist_ok=True)
        config.output_path.write_text(document.text, encoding="utf-8")
        logger.info("Theme generated successfully. Output file: %s", config.output_path)
    else:
        logger.info("Theme generated successfully")
    return document
