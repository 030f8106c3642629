"""Core lesstheme functionality: color resolution, reduction, rewriting, theme generation."""

from .cache import ContentCache, content_hash, get_content_cache
from .colors import is_valid_color, random_color
from .compiler import LessCompiler, StylesheetCompiler, render_less_content
from .config import ThemeConfig, load_config
from .errors import CompileError, ConfigError, CyclicAliasError, SourceError, ThemeError
from .generator import PipelineStage, generate_theme
from .reducer import RuleReducer
from .rewriter import ThemeDocument
from .shades import ShadeExpressionBuilder, build_shade
from .variables import generate_color_map, load_less_vars, read_less_vars

__all__ = [
    "ThemeError",
    "ConfigError",
    "SourceError",
    "CompileError",
    "CyclicAliasError",
    "ContentCache",
    "content_hash",
    "get_content_cache",
    "is_valid_color",
    "random_color",
    "LessCompiler",
    "StylesheetCompiler",
    "render_less_content",
    "ThemeConfig",
    "load_config",
    "PipelineStage",
    "generate_theme",
    "RuleReducer",
    "ThemeDocument",
    "ShadeExpressionBuilder",
    "build_shade",
    "generate_color_map",
    "load_less_vars",
    "read_less_vars",
]
