"""
Error types for lesstheme source loading, compilation and configuration.
"""

from __future__ import annotations


class ThemeError(Exception):
    """Base exception for all lesstheme errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(ThemeError):
    """
    Raised when theme configuration cannot be loaded.

    Examples:
    - Config file missing or not valid TOML
    - Unknown or mistyped options
    - Required directories not given
    """

    pass


class SourceError(ThemeError):
    """
    Raised when a stylesheet source cannot be read.

    Examples:
    - Library entry stylesheet missing
    - Local @import pointing at a file that does not exist
    """

    pass


class CompileError(ThemeError):
    """
    Raised when the LESS compiler rejects a document.

    Examples:
    - Syntax errors or undefined variables
    - lessc binary not installed
    - Compilation exceeding the configured timeout
    """

    def __init__(self, message: str, stderr: str | None = None):
        self.stderr = stderr
        super().__init__(message)


class CyclicAliasError(ThemeError):
    """Raised when a variable alias chain refers back to itself."""

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__("Cyclic variable alias: " + " -> ".join(chain))
