"""
Command-line entry point.

    plugin-scaffold plugin            create a new plugin interactively
    plugin-scaffold --config FILE     use a JSON settings file
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console

from . import __version__
from .commands.plugin import create_new_plugin
from .core.config import ConfigError, ConfigManager, find_config_file, get_config_manager
from .core.errors import ScaffoldError
from .logging_config import configure_logging, get_logger

logger = get_logger(__name__)

console = Console()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="plugin-scaffold",
        description="Scaffold plugins for a Vendure application",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="JSON settings file (default: ./.plugin-scaffold.json if present)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.add_parser("plugin", help="Create a new plugin interactively")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv: Arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success or cancellation, 1 for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        manager: ConfigManager = get_config_manager()
        config_file = args.config or find_config_file(Path.cwd())
        config = manager.get_config(config_file=config_file)
        for warning in manager.validate_config(config):
            console.print(f"  [yellow]•[/yellow] {warning}")
            logger.warning("Configuration: %s", warning)

        if args.command == "plugin":
            return create_new_plugin(console=console, config=config)

    except ConfigError as e:
        console.print(f"[red]✗ Configuration error:[/red] {e}")
        logger.error("Configuration error: %s", e)
        return 1
    except ScaffoldError as e:
        console.print(f"[red]✗[/red] {e}")
        logger.error("Scaffolding failed: %s", e, exc_info=args.verbose)
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
