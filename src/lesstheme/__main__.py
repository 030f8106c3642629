"""Allow running as ``python -m lesstheme``."""

from lesstheme.cli import main

main()
