from __future__ import annotations

import sys

import click

# Restore the default excepthook so Rich (installed by Textual) doesn't
# hijack tracebacks with fancy formatting that breaks CI and log parsing.
sys.excepthook = sys.__excepthook__

from prwatch.cli.admin import board, config
from prwatch.cli.info import list_cmd


@click.group()
def cli() -> None:
    """prwatch — watch your open GitHub pull requests and their checks."""


cli.add_command(list_cmd)
cli.add_command(board)
cli.add_command(config)

__all__ = ["cli"]
