"""CLI entrypoint for the fundamentals ETL pipeline.

Run as:
    python -m fundamentals_etl.etl.main [options]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from fundamentals_etl.core.config import (
    get_alpha_vantage_api_key,
    get_daily_limit,
    get_db_path,
    get_request_delay,
    get_request_timeout,
)
from fundamentals_etl.core.fundamentals.client import RealAlphaVantageClient
from fundamentals_etl.core.fundamentals.normalizer import (
    MissingValuePolicy,
    RevenueFieldPolicy,
)
from fundamentals_etl.domain.exceptions import StorageUnavailableError
from fundamentals_etl.etl.config import ETLConfig, parse_symbols
from fundamentals_etl.etl.pipeline import ETLRunSummary, run_pipeline
from fundamentals_etl.storage.statement_store import SQLiteStatementStore

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Load annual income statements and balance sheets into the fundamentals store"
    )
    parser.add_argument(
        "--symbols",
        type=str,
        default=None,
        help="Comma-separated tickers (default: ETL_SYMBOLS or TEL,ST,DD)",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to wait between companies",
    )
    parser.add_argument(
        "--lookback-years",
        type=int,
        default=None,
        help="Keep fiscal years >= current year minus this many years",
    )
    parser.add_argument(
        "--revenue-policy",
        choices=[p.value for p in RevenueFieldPolicy],
        default=None,
        help="Which income field is read as revenue",
    )
    parser.add_argument(
        "--missing-values",
        choices=[p.value for p in MissingValuePolicy],
        default=None,
        help="Normalize absent figures to null or zero",
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        default=None,
        help="SQLite database path (default: FUNDAMENTALS_DB_PATH or data/fundamentals.db)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run summary as JSON instead of a table",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ETLConfig:
    """Environment config with CLI overrides applied."""
    config = ETLConfig.from_env()
    if args.symbols:
        config.symbols = parse_symbols(args.symbols)
    if args.delay is not None:
        config.company_delay_seconds = max(0.0, args.delay)
    if args.lookback_years is not None:
        config.lookback_years = args.lookback_years
    if args.revenue_policy:
        config.revenue_policy = RevenueFieldPolicy(args.revenue_policy)
    if args.missing_values:
        config.missing_values = MissingValuePolicy(args.missing_values)
    return config


def print_summary(summary: ETLRunSummary) -> None:
    table = Table(title="ETL Summary", show_header=True, header_style="bold cyan")
    table.add_column("Symbol")
    table.add_column("Status")
    table.add_column("Rows Written", justify="right")
    table.add_column("Rows Failed", justify="right")
    table.add_column("Years Without Balance Sheet")
    table.add_column("Reason", style="dim")

    styles = {"loaded": "green", "skipped": "yellow", "failed": "red"}
    for company in summary.companies:
        table.add_row(
            company.symbol,
            f"[{styles[company.status]}]{company.status}[/]",
            str(company.rows_written),
            str(company.rows_failed),
            ", ".join(str(y) for y in company.skipped_years) or "-",
            company.reason or "",
        )

    console.print(table)
    console.print(f"  Fiscal years kept: [cyan]>= {summary.year_limit}[/]")
    console.print(f"  Total time: [cyan]{summary.elapsed_seconds:.1f}s[/]")
    if not summary.run_recorded:
        console.print("  [yellow]ETL run timestamp was not recorded[/]")


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    # Keep per-request connection chatter out of the run log
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    api_key = get_alpha_vantage_api_key()
    if not api_key:
        console.print("[bold yellow]ALPHA_VANTAGE_API_KEY is not set; upstream calls will be rejected[/]")

    config = config_from_args(args)
    store = SQLiteStatementStore(args.db_path or get_db_path())
    client = RealAlphaVantageClient(
        api_key=api_key,
        call_log=store,
        daily_limit=get_daily_limit(),
        request_delay=get_request_delay(),
        timeout=get_request_timeout(),
    )

    console.print(f"[bold blue]Loading fundamentals for {', '.join(config.symbols)}[/]")
    console.print(f"  Database: [cyan]{store.db_path}[/]")

    try:
        summary = run_pipeline(config, client, store)
    except StorageUnavailableError as e:
        console.print(f"\n[bold red]ETL failed:[/] {e}")
        return 1

    if args.json:
        console.print_json(json.dumps(summary.to_dict()))
    else:
        print_summary(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
