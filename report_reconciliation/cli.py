"""CLI for the ``report_reconciliation`` package.

Runs the engine over report payloads saved as JSON files, which is how
upstream responses are captured for debugging. Environment variables are
loaded from a local ``.env`` using ``python-dotenv`` before any command runs.
Business logic lives in ``report_reconciliation.api`` and related modules;
the handlers here only read files and print JSON.
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from collections.abc import Mapping, Sequence
from datetime import date
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv

from .api import (
    ReconciliationContractError,
    build_detail_response,
    build_previous_period_response,
    extract_breakdown,
    extract_category_transactions,
)
from .logging_setup import configure_logging
from .models import PeriodKind, PeriodWindow, Platform
from .pagination import PAGE_SIZE, PageFetcher

_PLATFORM_ENV_VAR = "REPORT_RECONCILIATION_PLATFORM"


# ---- Small module-level helpers used by CLI commands -------------------------


def _resolve_platform(platform: str | None) -> Platform:
    """Resolve ``--platform``, falling back to the env default, then QBO."""

    value = platform or os.getenv(_PLATFORM_ENV_VAR) or Platform.QBO.value
    return Platform.parse(value)


def _read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _parse_window(from_date: str | None, to_date: str | None, kind: str) -> PeriodWindow:
    if not from_date or not to_date:
        raise ValueError("--from-date and --to-date are required")
    return PeriodWindow(date.fromisoformat(from_date), date.fromisoformat(to_date), kind)


def file_page_fetcher(records: Sequence[Any], *, page_size: int = PAGE_SIZE) -> PageFetcher:
    """Serve ``records`` page by page the way the Xero invoices endpoint does.

    Records whose status is not among the requested statuses are left out
    before paging, as the upstream status filter would.
    """

    async def fetch_page(page: int, statuses: Sequence[str]) -> list[Any]:
        wanted = {s.upper() for s in statuses}
        matching = [
            r
            for r in records
            if not wanted
            or (
                isinstance(r, Mapping)
                and str(r.get("Status", r.get("status", ""))).upper() in wanted
            )
        ]
        start = (page - 1) * page_size
        return matching[start : start + page_size]

    return fetch_page


def _print_json(payload: Mapping[str, Any]) -> None:
    print(json.dumps(payload, indent=2))


def cmd_category_detail(
    *,
    platform: str | None,
    category: str,
    report_path: Path | None,
    invoices_path: Path | None,
    accounts_path: Path | None,
    from_date: str | None,
    to_date: str | None,
) -> int:
    """Print the drill-down for ``category``. Returns a process exit code."""

    try:
        active = _resolve_platform(platform)
        report = _read_json(report_path) if report_path else None
        fetch_page: PageFetcher | None = None
        window: PeriodWindow | None = None
        accounts = None
        if active is Platform.XERO:
            if invoices_path:
                fetch_page = file_page_fetcher(_read_json(invoices_path))
            if accounts_path:
                accounts = _read_json(accounts_path)
            window = _parse_window(from_date, to_date, PeriodKind.CUSTOM)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: Cannot read input: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Failed to parse JSON: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        details = asyncio.run(
            extract_category_transactions(
                active,
                category,
                report=report,
                fetch_page=fetch_page,
                accounts=accounts,
                window=window,
            )
        )
    except ReconciliationContractError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _print_json(build_detail_response(category, details))
    return 0


def cmd_breakdown(
    *,
    platform: str | None,
    report_path: Path,
    from_date: str,
    to_date: str,
    timeframe: str,
) -> int:
    """Print the ranked expense breakdown of a P&L report."""

    try:
        active = _resolve_platform(platform)
        window = _parse_window(from_date, to_date, timeframe)
        report = _read_json(report_path)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: Cannot read input: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Failed to parse JSON: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    buckets = extract_breakdown(report, active)
    _print_json(build_previous_period_response(buckets, window))
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Reduce saved QuickBooks Online / Xero report payloads to the dashboard's "
        "canonical JSON. Loads settings from a local .env before running."
    ),
)

PLATFORM_HELP = f"QBO or XERO (defaults to ${_PLATFORM_ENV_VAR}, then QBO)."


@app.command("category-detail")
def category_detail_cmd(
    category: Annotated[str, typer.Option("--category", help="Expense category name.")],
    *,
    platform: Annotated[str | None, typer.Option(help=PLATFORM_HELP)] = None,
    report: Annotated[
        Path | None, typer.Option(help="QBO ProfitAndLossDetail report JSON.", dir_okay=False)
    ] = None,
    invoices: Annotated[
        Path | None, typer.Option(help="Xero invoices JSON (a list of records).", dir_okay=False)
    ] = None,
    accounts: Annotated[
        Path | None, typer.Option(help="Xero chart of accounts JSON.", dir_okay=False)
    ] = None,
    from_date: Annotated[str | None, typer.Option(help="Window start, YYYY-MM-DD.")] = None,
    to_date: Annotated[str | None, typer.Option(help="Window end, YYYY-MM-DD.")] = None,
) -> None:
    """Print the transactions booked under one expense category."""

    code = cmd_category_detail(
        platform=platform,
        category=category,
        report_path=report,
        invoices_path=invoices,
        accounts_path=accounts,
        from_date=from_date,
        to_date=to_date,
    )
    if code:
        raise typer.Exit(code)


@app.command("breakdown")
def breakdown_cmd(
    report: Annotated[
        Path, typer.Option(help="ProfitAndLoss report JSON for the period.", dir_okay=False)
    ],
    *,
    from_date: Annotated[str, typer.Option(help="Period start, YYYY-MM-DD.")],
    to_date: Annotated[str, typer.Option(help="Period end, YYYY-MM-DD.")],
    platform: Annotated[str | None, typer.Option(help=PLATFORM_HELP)] = None,
    timeframe: Annotated[
        str, typer.Option(help="MONTH, YEAR, CUSTOM or TRAILING_12.")
    ] = PeriodKind.YEAR.value,
) -> None:
    """Print the top-10 expense categories of a P&L report."""

    code = cmd_breakdown(
        platform=platform,
        report_path=report,
        from_date=from_date,
        to_date=to_date,
        timeframe=timeframe,
    )
    if code:
        raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Load ``.env`` from the working directory and configure logging once."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
