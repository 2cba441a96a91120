"""Command-line interface for kinoparse."""

import argparse
import asyncio
import sys
from typing import List, Optional

from kinoparse.browser import PlaywrightBrowser
from kinoparse.browser_config import HEADED_CONFIG, STEALTH_CONFIG, browser_config_from_env
from kinoparse.checkpoint import AbstractCheckpointStore, get_checkpoint_store
from kinoparse.combiner import combine
from kinoparse.config import ScraperConfig, settings
from kinoparse.countries import CountryLookup
from kinoparse.logging_config import get_logger, setup_logging
from kinoparse.models import MovieRecord
from kinoparse.output_manager import OutputManager
from kinoparse.scraper import KinopoiskScraper

logger = get_logger(__name__)


async def _async_enrich(
    records: List[MovieRecord],
    store: AbstractCheckpointStore,
    restored: List[MovieRecord],
    headed: bool = False,
) -> KinopoiskScraper:
    """Run one enrichment batch.

    Args:
        records: Records to enrich, mutated in place
        store: Checkpoint store receiving every processed record
        restored: Restore cache from earlier runs
        headed: Show the browser window

    Returns:
        The scraper, for its challenges and summary
    """
    config = ScraperConfig.from_env()
    countries = (
        CountryLookup.from_file(settings.COUNTRIES_FILE)
        if settings.COUNTRIES_FILE
        else CountryLookup()
    )
    browser_config = browser_config_from_env(HEADED_CONFIG if headed else STEALTH_CONFIG)

    async with PlaywrightBrowser(browser_config) as browser:
        scraper = KinopoiskScraper(
            browser,
            checkpoint_store=store,
            countries=countries,
            config=config,
        )
        total = len(records)
        scraper.progress.subscribe_progress(
            lambda count: print(f"[{count}/{total}] {scraper.current}")
        )
        scraper.progress.subscribe_completed(lambda: print("All records processed"))
        await scraper.run(records, restored=restored)
    return scraper


def enrich_command(args):
    """Enrich a queue of movie records from kinopoisk."""
    output = OutputManager(args.output_dir)
    try:
        records = output.load_records(args.input)
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: could not read {args.input}: {e}")
        sys.exit(1)

    store = get_checkpoint_store()
    try:
        if args.clear_checkpoints:
            store.clear()
        restored = store.load_all() if args.resume else []
        if restored:
            print(f"Resuming with {len(restored)} checkpointed records")

        try:
            scraper = asyncio.run(_async_enrich(records, store, restored, headed=args.headed))
        except KeyboardInterrupt:
            logger.warning("Enrichment interrupted by user")
            print("\nInterrupted. Processed records are checkpointed; rerun with --resume to continue.")
            sys.exit(130)

        run_dir = output.create_run_directory("enrich")
        output.save_results(
            run_dir,
            records,
            challenges=scraper.challenges,
            stats=scraper.get_summary(),
        )
    finally:
        store.close()

    complete = sum(1 for record in records if record.is_complete)
    print(f"\nEnriched {complete}/{len(records)} records fully")
    if scraper.challenges:
        print(f"{len(scraper.challenges)} records abandoned on captcha")
    print(f"Results written to {run_dir}")


def combine_command(args):
    """Join enrichment results with a play report."""
    output = OutputManager(args.output_dir)
    try:
        records = output.load_records(args.results)
        entries = output.load_play_report(args.reports)
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    rows = combine(records, entries)
    run_dir = output.create_run_directory("combine")
    path = output.save_report(run_dir, rows)
    print(f"Combined report with {len(rows)} rows written to {path}")


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="kinoparse - Enrich movie schedules with kinopoisk metadata"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.LOG_LEVEL.upper(),
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        default=settings.LOG_FILE,
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    enrich_parser = subparsers.add_parser(
        "enrich", help="Look up every record of a JSON or CSV file on kinopoisk."
    )
    enrich_parser.add_argument(
        "input", help="Records file (name, year, country[, key, genre])"
    )
    enrich_parser.add_argument(
        "--output-dir",
        default=settings.OUTPUT_DIR,
        help=f"Base output directory (default: {settings.OUTPUT_DIR})",
    )
    enrich_parser.add_argument(
        "--resume",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Copy already checkpointed records instead of fetching them again (default: on)",
    )
    enrich_parser.add_argument(
        "--clear-checkpoints",
        action="store_true",
        help="Delete all checkpoints before starting",
    )
    enrich_parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    enrich_parser.set_defaults(func=enrich_command)

    combine_parser = subparsers.add_parser(
        "combine", help="Join enrichment results with a play report."
    )
    combine_parser.add_argument("results", help="Enrichment results (results.json or CSV)")
    combine_parser.add_argument("reports", help="Play report (JSON or CSV)")
    combine_parser.add_argument(
        "--output-dir",
        default=settings.OUTPUT_DIR,
        help=f"Base output directory (default: {settings.OUTPUT_DIR})",
    )
    combine_parser.set_defaults(func=combine_command)

    args = parser.parse_args(argv)

    setup_logging(
        level=args.log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
