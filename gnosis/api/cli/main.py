"""CLI entry point for Gnosis."""

import argparse
import sys

from loguru import logger

from gnosis.core.config import Config
from gnosis.core.exceptions import ConfigError
from gnosis.version import __version__


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI.

    Args:
        verbose: Whether to enable verbose logging
    """
    logger.remove()

    if verbose:
        logger.add(
            sys.stderr,
            level="DEBUG",
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
                "<level>{message}</level>"
            ),
        )
    else:
        logger.add(
            sys.stderr,
            level="INFO",
            format=(
                "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
                "<level>{message}</level>"
            ),
        )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default="config.json",
        help="Path to the JSON configuration file (default: config.json)",
    )
    parser.add_argument(
        "--index",
        metavar="NAME",
        help="Only process the index with this name",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the complete argument parser."""
    parser = argparse.ArgumentParser(
        prog="gnosis",
        description="Keep full-text indexes of wiki directories in sync with disk",
    )
    parser.add_argument("--version", action="version", version=f"gnosis {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    index_parser = subparsers.add_parser(
        "index", help="Populate every configured index once and exit"
    )
    _add_common_arguments(index_parser)

    watch_parser = subparsers.add_parser(
        "watch", help="Populate every configured index and keep it in sync"
    )
    _add_common_arguments(watch_parser)

    return parser


def load_config(args: argparse.Namespace) -> Config:
    """Load configuration, narrowed to one index when ``--index`` is given.

    Raises:
        ConfigError: If configuration is invalid or the index does not exist
    """
    config = Config.load(args.config)
    if args.verbose or config.debug:
        setup_logging(verbose=True)

    if args.index:
        try:
            section = config.get_index(args.index)
        except KeyError:
            raise ConfigError(f"No index named {args.index!r} in {args.config}") from None
        config = config.model_copy(update={"indexes": [section]})

    if not config.indexes:
        raise ConfigError(f"No indexes configured in {args.config}")
    return config


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)

    try:
        config = load_config(args)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    try:
        if args.command == "index":
            from .commands.index import index_command

            exit_code = index_command(args, config)
        elif args.command == "watch":
            from .commands.watch import watch_command

            exit_code = watch_command(args, config)
        else:
            logger.error(f"Unknown command: {args.command}")
            exit_code = 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        exit_code = 0

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
