"""
LexiconHub command-line interface.

Usage:
    # Look up a word or phrase
    python -m lexicon_hub.cli hello world

    # Bypass both cache tiers
    python -m lexicon_hub.cli -n serendipity

    # JSON output
    python -m lexicon_hub.cli --json cat

    # Download the offline dictionary and migrate it into the store
    python -m lexicon_hub.cli --update-dict

    # Migrate an already downloaded legacy database
    python -m lexicon_hub.cli --migrate ./kd_data.db

    # Store diagnostics
    python -m lexicon_hub.cli --status
"""

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import List, Optional

from lexicon_hub.application.update import migration_config_from_state, update_dictionary
from lexicon_hub.cli.render import render_migration_report, render_record
from lexicon_hub.config.settings import get_settings
from lexicon_hub.exceptions import LexiconError
from lexicon_hub.migration.legacy import FullMigrationReport, migrate_legacy_database
from lexicon_hub.state import AppState, build_app_state
from lexicon_hub.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_LOOKUP_FAILED = 1
EXIT_MIGRATION_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lexicon_hub.cli",
        description="LexiconHub - dictionary lookup with offline store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("query", nargs="*", help="Word or phrase to look up")
    parser.add_argument(
        "-t", "--text", action="store_true", help="Treat the query as long text"
    )
    parser.add_argument(
        "-n",
        "--nocache",
        action="store_true",
        help="Skip the cache and the offline store; always query online",
    )
    parser.add_argument("--json", action="store_true", help="Print the record as JSON")
    parser.add_argument(
        "--update-dict",
        action="store_true",
        help="Download the offline dictionary and migrate it into the store",
    )
    parser.add_argument(
        "--migrate",
        metavar="PATH",
        type=Path,
        help="Migrate a legacy dictionary database into the store",
    )
    parser.add_argument("--status", action="store_true", help="Show store diagnostics")
    parser.add_argument("--log-level", help="Override LEXICON_LOG_LEVEL")
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable migration progress bars"
    )
    return parser


def _install_cancel_handler(cancel_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    except (NotImplementedError, RuntimeError):
        # Platforms without loop signal handlers keep the default KeyboardInterrupt
        logger.debug("cli.signal_handler_unavailable")


def _migration_exit_code(report: FullMigrationReport) -> int:
    print(render_migration_report(report))
    if report.cancelled:
        print("\nMigration cancelled; remaining tables were not processed.")
    return EXIT_MIGRATION_FAILED if report.all_failed else EXIT_OK


async def _run_lookup(state: AppState, args: argparse.Namespace) -> int:
    query = " ".join(args.query)
    try:
        record = await state.lookup.lookup(
            query, skip_cache=args.nocache, force_long_text=args.text
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOOKUP_FAILED
    except LexiconError as e:
        logger.error("cli.lookup_failed", **e.to_dict())
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOOKUP_FAILED

    if args.json:
        print(record.model_dump_json(by_alias=True, indent=2))
    else:
        print(render_record(record))
    return EXIT_OK if record.found else EXIT_LOOKUP_FAILED


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    state = await build_app_state(settings)
    try:
        if args.status:
            status = await state.status()
            if args.json:
                print(json.dumps(status, ensure_ascii=False, indent=2))
            else:
                for key, value in status.items():
                    print(f"{key}: {value}")
            return EXIT_OK

        if args.update_dict or args.migrate:
            cancel_event = asyncio.Event()
            _install_cancel_handler(cancel_event)
            progress = not args.no_progress
            try:
                if args.migrate:
                    report = await migrate_legacy_database(
                        args.migrate,
                        state.store,
                        migration_config_from_state(state, progress=progress),
                        cancel_event,
                    )
                else:
                    report = await update_dictionary(state, cancel_event, progress=progress)
            except LexiconError as e:
                logger.error("cli.migration_failed", **e.to_dict())
                print(f"Error: {e}", file=sys.stderr)
                return EXIT_MIGRATION_FAILED
            return _migration_exit_code(report)

        if not args.query:
            print("Error: no query given", file=sys.stderr)
            return EXIT_LOOKUP_FAILED
        return await _run_lookup(state, args)
    finally:
        await state.close()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 success, 1 failed lookup, 2 failed migration)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        settings = get_settings()
        configure_logging(args.log_level, settings.log_file)

    try:
        return asyncio.run(run(args))
    except LexiconError as e:
        # Store initialization failures surface here
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOOKUP_FAILED
