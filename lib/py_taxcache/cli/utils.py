"""
Shared utilities for the taxcache CLI.

This module provides the Rich console instance, message helpers and logging
setup used across all CLI commands.
"""

from __future__ import annotations

import json
import sys

from loguru import logger
from rich.console import Console

# ============================================================================
# CONSOLE AND OUTPUT UTILITIES
# ============================================================================

console = Console()

MAX_PREVIEW_ITEMS = 5  # Max skipped files to show before "... and N more"


def error(message: str, exit_code: int = 1) -> None:
    """Print error message and exit."""
    console.print(f"[red]✗ Error:[/red] {message}")
    sys.exit(exit_code)


def success(message: str) -> None:
    """Print success message."""
    console.print(f"[green]✓[/green] {message}")


def info(message: str) -> None:
    """Print info message."""
    console.print(f"[cyan]i[/cyan]  {message}")


def warning(message: str) -> None:
    """Print warning message."""
    console.print(f"[yellow]⚠[/yellow]  {message}")


def output_json(data: dict | list) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(data, default=str))


# ============================================================================
# LOGGING
# ============================================================================


def configure_logging(verbosity: int) -> None:
    """
    Configure loguru logging based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG
    """
    logger.remove()  # Remove default handler

    if verbosity == 0:
        level = "WARNING"
    elif verbosity == 1:
        level = "INFO"
    else:
        level = "DEBUG"

    logger.add(
        sys.stderr,
        level=level,
        format="<level>{level: <8}</level> | {message}",
    )
