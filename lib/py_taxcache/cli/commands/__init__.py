"""
Command modules for the taxcache CLI.

Each submodule defines one or more Typer commands that are registered
with the main app in py_taxcache/cli/app.py.
"""

from py_taxcache.cli.commands import build, entries, version

__all__: list[str] = [
    "build",
    "entries",
    "version",
]
