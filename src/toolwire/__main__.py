"""Allow ``python -m toolwire``."""

from toolwire.cli.app import cli

cli()
