# main.py

"""Entry point for stockhub: fetch feeds, parse them, look up EANs, serve."""

import argparse
import asyncio
import logging
import sys

from stockhub.config.logging_config import setup_logging
from stockhub.config.settings import Settings

logger = logging.getLogger("stockhub.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(s["id"] for s in Settings.AVAILABLE_SOURCES)

    parser = argparse.ArgumentParser(
        prog="stockhub",
        description="Multi-warehouse stock aggregation and EAN lookup.",
        epilog=f"Available sources: {valid_ids}",
    )
    parser.add_argument(
        "-d",
        "--data-dir",
        default=None,
        dest="data_dir",
        help="Custom data directory (default: data/).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    fetch = commands.add_parser("fetch", help="Download supplier feeds.")
    fetch.add_argument(
        "-s",
        "--sources",
        default=None,
        help="Comma-separated source IDs (default: all).",
    )

    parse = commands.add_parser(
        "parse", help="Normalise stored feeds and aggregate by EAN."
    )
    parse.add_argument(
        "-s",
        "--sources",
        default=None,
        help="Comma-separated source IDs (default: all).",
    )
    parse.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )

    lookup = commands.add_parser("lookup", help="Look up one or more EANs.")
    lookup.add_argument("eans", nargs="+", help="EAN code(s).")
    lookup.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )

    serve = commands.add_parser("serve", help="Run the lookup HTTP API.")
    serve.add_argument("--host", default=Settings.API_HOST)
    serve.add_argument("--port", type=int, default=Settings.API_PORT)
    return parser


def main() -> None:
    """Route to the requested sub-command and exit with its code."""
    args = _build_parser().parse_args()
    log_file = setup_logging(args.command)
    logger.info("stockhub starting, log file: %s", log_file)

    from stockhub.cli import runner

    try:
        if args.command == "fetch":
            exit_code = asyncio.run(
                runner.run_fetch(args.sources, args.data_dir)
            )
        elif args.command == "parse":
            exit_code = asyncio.run(
                runner.run_parse(
                    args.sources, args.output_format, args.data_dir
                )
            )
        elif args.command == "lookup":
            exit_code = runner.run_lookup(
                args.eans, args.output_format, args.data_dir
            )
        else:
            exit_code = runner.run_server(
                args.host, args.port, args.data_dir
            )
    except Exception:
        logger.critical("Fatal error during %s", args.command, exc_info=True)
        raise
    finally:
        logger.info("stockhub %s finished", args.command)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
