#!/usr/bin/env python3
"""
Main CLI entry point using Typer.
"""

import logging
import sys
from typing import Optional

import typer

from volume_reconciler.cli.commands import volume
from volume_reconciler.cli.lib.config import load_config

app = typer.Typer(
    name="volume-reconciler",
    help="Database cluster volume resize tool",
    add_completion=False,
)

# Add command groups
app.add_typer(volume.app, name="volume", help="Volume reconciliation commands")


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: from config)"),
):
    """
    Configure logging for all commands.
    """
    level = (log_level or load_config().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main() -> int:
    """Main entry point."""
    try:
        app()
        return 0
    except KeyboardInterrupt:
        typer.echo("\nOperation cancelled by user", err=True)
        return 130
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
