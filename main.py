"""CLI entry point for the thehub.io jobs scraper."""

import argparse
import asyncio
import logging
import sys

from hubjobs.core.config import RunConfig, Settings, describe_limit, resolve_run_config
from hubjobs.core.db import Dataset, count_items, export_items_json, init_db
from hubjobs.core.errors import ApiError
from hubjobs.http.session import HttpSession
from hubjobs.pipeline.orchestrator import audit_dataset, run_scraper


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="thehub.io jobs scraper - list jobs per region and extract full job records",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- scrape subcommand (default) ---
    scrape_parser = subparsers.add_parser("scrape", help="Scrape job listings and details")
    _add_common_args(scrape_parser)
    scrape_parser.add_argument(
        "--regions",
        help="Comma-separated regions (FI,SE,DK,NO,IS,EU,REMOTE); overrides the config",
    )
    scrape_parser.add_argument(
        "--job-url",
        help="Scrape a single job page instead of the listing API",
    )
    scrape_parser.add_argument(
        "--max-items",
        type=int,
        help="Maximum number of jobs to scrape (0 = unlimited)",
    )
    scrape_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the resolved run configuration without making requests",
    )
    scrape_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export the stored dataset to format (json)",
    )

    # --- validate subcommand ---
    validate_parser = subparsers.add_parser(
        "validate",
        help="Re-validate stored dataset items and report the success rate",
    )
    _add_common_args(validate_parser)

    # --- backward compat: top-level flags for scrape ---
    parser.add_argument("--config", default="config/settings.yaml", help=argparse.SUPPRESS)
    parser.add_argument("--regions", help=argparse.SUPPRESS)
    parser.add_argument("--job-url", help=argparse.SUPPRESS)
    parser.add_argument("--max-items", type=int, help=argparse.SUPPRESS)
    parser.add_argument("--dry-run", action="store_true", help=argparse.SUPPRESS)
    parser.add_argument("--export", choices=["json"], help=argparse.SUPPRESS)
    parser.add_argument("--verbose", "-v", action="store_true", help=argparse.SUPPRESS)

    args = parser.parse_args(argv)

    # Default to scrape when no subcommand given
    if args.command is None:
        args.command = "scrape"

    return args


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with CLI flags applied to the input section."""
    updates: dict[str, object] = {}
    if args.regions:
        updates["regions"] = [r.strip() for r in args.regions.split(",") if r.strip()]
    if args.job_url:
        updates["job_url"] = args.job_url
    if args.max_items is not None:
        updates["max_requests_per_crawl"] = args.max_items
    if not updates:
        return settings
    merged = {**settings.input.model_dump(), **updates}
    return settings.model_copy(update={"input": type(settings.input).model_validate(merged)})


def dry_run(run_config: RunConfig, settings: Settings) -> None:
    """Print what would happen without making any request."""
    if run_config.single_job_mode:
        print(f"[DRY RUN] Single job mode: {run_config.job_url} (from {run_config.job_url_source})")
    else:
        regions = ", ".join(r.value for r in run_config.regions)
        print(f"[DRY RUN] Regions: {regions}")
        print(f"  Region failures: {settings.listing.on_region_error.value}")
        print(f"  Page concurrency: {settings.listing.page_concurrency}")
    print(f"[DRY RUN] {describe_limit(run_config)}")
    print(f"  Detail concurrency: {settings.crawler.max_concurrency}")
    print(f"  Retries per request: {settings.crawler.max_request_retries}")
    print(f"  Dataset: {settings.database.path}")
    print("[DRY RUN] Would write 0 records (no requests in dry-run)")


async def run(run_config: RunConfig, settings: Settings, export_format: str | None) -> None:
    """Run the scraper against thehub.io."""
    conn = init_db(settings.database.path)
    dataset = Dataset(conn)

    try:
        async with HttpSession(settings.crawler) as session:
            result = await run_scraper(run_config, settings, session, dataset)

        stats = result.stats
        print(f"\nScrape complete ({result.mode}): {result.listed_count} listed, "
              f"{stats.succeeded} records, {stats.failed} extraction failures, "
              f"{stats.request_failures} failed requests.")
        if stats.skipped:
            print(f"  {stats.skipped} requests skipped by the item limit")

        ok, errors = count_items(conn)
        print(f"  Dataset now holds {ok} records and {errors} error placeholders")

        if export_format == "json":
            print(f"\n{export_items_json(dataset)}")
    finally:
        conn.close()


def cmd_validate(settings: Settings) -> int:
    """Handle validate subcommand. Returns the exit code."""
    conn = init_db(settings.database.path)
    try:
        report = audit_dataset(Dataset(conn))
    finally:
        conn.close()

    print(f"Validated {report.total} items: {report.valid} valid, "
          f"{len(report.invalid)} invalid, {report.placeholders} error placeholders")
    for url, error in report.invalid:
        print(f"  {url or '<no url>'}")
        for violation in error.violations:
            print(f"    - {violation}")
    print(f"Success rate: {report.success_rate:.1%}")
    return 1 if report.invalid else 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "validate":
        sys.exit(cmd_validate(settings))

    # scrape (default)
    try:
        settings = apply_overrides(settings, args)
        run_config = resolve_run_config(settings)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.dry_run:
        dry_run(run_config, settings)
        return

    try:
        asyncio.run(run(run_config, settings, args.export))
    except (ApiError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
