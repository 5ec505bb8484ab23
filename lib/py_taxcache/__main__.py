"""Allow running the CLI with ``python -m py_taxcache``."""

from py_taxcache.cli.app import main

main()
