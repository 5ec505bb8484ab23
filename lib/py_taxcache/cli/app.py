"""
taxcache Command Line Interface

Builds and inspects minimal NCBI taxonomy caches for a dataset.

Usage:
    taxcache build --cache taxa.json --datadir results/ \
        --mergeddump merged.dmp --taxdump rankedlineage.dmp
    taxcache list --cache taxa.json
    taxcache lookup 9606 --cache taxa.json

This module defines the Typer app and registers all commands.
Command implementations are in py_taxcache.cli.commands.* modules.
"""

from __future__ import annotations

import sys
from typing import Annotated

import typer

from py_taxcache.cli.commands.build import build
from py_taxcache.cli.commands.entries import list_entries, lookup
from py_taxcache.cli.commands.version import version
from py_taxcache.cli.utils import configure_logging, console

# ============================================================================
# TYPER APP
# ============================================================================

app = typer.Typer(
    name="taxcache",
    help="Create and inspect taxon caches built from the NCBI taxdump",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v for INFO, -vv for DEBUG)",
        ),
    ] = 0,
) -> None:
    """Create and inspect taxon caches built from the NCBI taxdump."""
    configure_logging(verbose)


# ============================================================================
# COMMAND REGISTRATION
# ============================================================================

app.command("build")(build)
app.command("init", hidden=True)(build)  # Alias

app.command("list")(list_entries)
app.command("ls", hidden=True)(list_entries)  # Alias

app.command("lookup")(lookup)

app.command("version")(version)


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except (typer.Exit, typer.Abort):
        # Normal exit from Typer
        raise
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
