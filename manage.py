#!/usr/bin/env python3
"""
CareStock management CLI.

Usage:
    python manage.py init-db              Apply pending migrations
    python manage.py init-db --status     Show migration status
    python manage.py serve                Start the API server
    python manage.py record ITEM IN 10    Record a stock movement
    python manage.py zero ITEM            Zero a pool with a correcting OUT
    python manage.py balance ITEM         Show a pool balance
    python manage.py forecast             Forecast facility depletion
    python manage.py alerts --feeds f.yaml  Collect alerts for today
    python manage.py report               Facility inventory flow
"""

import argparse
import asyncio
import subprocess
import sys
from pathlib import Path

from carestock.config import configure_logging, get_settings
from carestock.core.exceptions import CareStockError

ROOT_DIR = Path(__file__).resolve().parent


async def _with_pool(coro):
    """Run a coroutine against the database, closing the pool afterwards."""
    from carestock.infrastructure.storage.sqlite import close_pool
    from carestock.infrastructure.storage.sqlite.migrations import run_migrations

    await run_migrations(create_backup_before=False)
    try:
        return await coro
    finally:
        await close_pool()


def _run(coro) -> None:
    try:
        asyncio.run(_with_pool(coro))
    except CareStockError as e:
        print(f"Error: {e.message}")
        sys.exit(1)


def cmd_init_db(args: argparse.Namespace) -> None:
    """Apply migrations or report their status."""
    from carestock.infrastructure.storage.sqlite.migrations import (
        get_migration_status,
        initialize_database,
        verify_schema_integrity,
    )

    if args.status:
        status = asyncio.run(get_migration_status())
        if not status["exists"]:
            print("Database does not exist yet.")
        else:
            print(f"Current version: {status['current_version']}")
            print(f"Applied: {', '.join(status['applied_migrations']) or '-'}")
        print(f"Pending: {', '.join(status['pending_migrations']) or '-'}")
        return

    if args.verify:
        checks = asyncio.run(verify_schema_integrity())
        failed = False
        for check in checks:
            print(f"{check['check']:<22} {check['status']}")
            failed = failed or check["status"] != "PASS"
        if failed:
            sys.exit(1)
        return

    results = asyncio.run(initialize_database(create_backup_before=not args.no_backup))
    if not results:
        print("Database is up to date.")
    for result in results:
        mark = "ok" if result.success else f"FAILED: {result.error}"
        print(f"v{result.version}_{result.name}: {mark} ({result.execution_time_ms} ms)")
    if any(not r.success for r in results):
        sys.exit(1)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start uvicorn in the foreground."""
    settings = get_settings()
    host = args.host or settings.api.host
    port = args.port or settings.api.port
    uvicorn_cmd = [
        sys.executable, "-m", "uvicorn",
        "carestock.api.main:app",
        "--host", host,
        "--port", str(port),
    ]
    if args.reload:
        uvicorn_cmd.append("--reload")

    print(f"Starting server on {host}:{port}...")
    try:
        subprocess.run(uvicorn_cmd, cwd=str(ROOT_DIR), check=False)
    except KeyboardInterrupt:
        print("\nServer stopped.")


def cmd_record(args: argparse.Namespace) -> None:
    """Append one movement to the ledger."""
    from carestock.application.dto.requests import RecordMovementRequest
    from carestock.application.use_cases import RecordMovementUseCase

    async def record() -> None:
        use_case = RecordMovementUseCase()
        result = await use_case.execute(
            RecordMovementRequest(
                item_id=args.item_id,
                direction=args.direction,
                quantity=args.quantity,
                subject_id=args.subject,
                movement_date=args.date,
                note=args.note,
                enforce_available=args.enforce,
            )
        )
        event = result.movement
        print(
            f"Recorded {event.direction.value} {event.quantity} x {event.item_id} "
            f"on {event.movement_date.isoformat()} (id {event.id})"
        )
        print(f"Balance: {result.balance}")

    _run(record())


def cmd_zero(args: argparse.Namespace) -> None:
    """Bring a pool back to zero."""
    from carestock.application.dto.requests import ZeroBalanceRequest
    from carestock.application.use_cases import ZeroBalanceUseCase

    async def zero() -> None:
        result = await ZeroBalanceUseCase().execute(
            ZeroBalanceRequest(item_id=args.item_id, subject_id=args.subject, movement_date=args.date)
        )
        if result.movement is None:
            print(f"Nothing to zero (balance {result.previous_balance}).")
        else:
            print(f"Zeroed {result.item_id}: {result.previous_balance} -> {result.balance}")

    _run(zero())


def cmd_balance(args: argparse.Namespace) -> None:
    """Print the balance of one pool."""
    from carestock.application.use_cases.common import load_snapshot, parse_iso_date
    from carestock.core.services import BalanceCalculator
    from carestock.infrastructure.storage.sqlite import get_movement_store

    async def balance() -> None:
        store = await get_movement_store()
        if args.as_of:
            as_of = parse_iso_date(args.as_of, "as_of")
            value = BalanceCalculator(await load_snapshot(store)).balance_of(
                args.item_id, args.subject, as_of
            )
        else:
            value = await store.balance(args.item_id, args.subject)
        scope = f"subject {args.subject}" if args.subject else "facility"
        print(f"{args.item_id} ({scope}): {value}")

    _run(balance())


def cmd_forecast(args: argparse.Namespace) -> None:
    """Print depletion forecasts, most urgent first."""
    from carestock.application.use_cases import ForecastStockUseCase

    async def forecast() -> None:
        use_case = ForecastStockUseCase()
        response = use_case.to_response(
            await use_case.execute(item_id=args.item, subject_id=args.subject, as_of=args.as_of)
        )
        print(f"Forecast as of {response.as_of.isoformat()}")
        for f in response.forecasts:
            days = f.days_remaining if f.days_remaining is not None else f.remaining_kind
            owner = f" [{f.subject_id}]" if f.subject_id else ""
            print(f"  {f.urgency_tier:<8} {f.item_name}{owner}: balance {f.current_balance}, days {days}")
        if not response.forecasts:
            print("  (no stock pools)")

    _run(forecast())


def cmd_alerts(args: argparse.Namespace) -> None:
    """Print the alert feed."""
    from carestock.application.dto.requests import CollectAlertsRequest
    from carestock.application.use_cases import CollectAlertsUseCase
    from carestock.infrastructure.feeds import YamlFeedFile

    async def alerts() -> None:
        feeds = [YamlFeedFile(path) for path in args.feeds]
        use_case = CollectAlertsUseCase(
            expiring_feeds=[f.expiring_feed() for f in feeds],
            recurrence_feeds=[f.recurrence_feed() for f in feeds],
            schedule_feeds=[f.schedule_feed() for f in feeds],
        )
        result = await use_case.execute(
            CollectAlertsRequest(as_of=args.as_of, include_stock=not args.no_stock)
        )
        print(f"Alerts as of {result.as_of.isoformat()}: {len(result.alerts)}")
        for alert in result.alerts:
            when = f" {alert.time}" if alert.time else ""
            print(f"  [{alert.severity.value}] {alert.category.value}{when}: {alert.title} - {alert.message}")

    _run(alerts())


def cmd_report(args: argparse.Namespace) -> None:
    """Print the facility inventory flow."""
    from carestock.application.use_cases import StockReportUseCase

    async def report() -> None:
        use_case = StockReportUseCase()
        response = await use_case.inventory_flow(as_of=args.as_of, category=args.category)
        print(
            f"{response.total_items} items, {response.low_items} low, "
            f"{response.depleted_items} depleted"
        )
        for row in response.rows:
            days = "-" if row.days_left is None else str(row.days_left)
            print(
                f"  {row.status:<8} {row.item_name:<30} balance {row.current_balance:>6} "
                f"out/{row.recent_out:<5} days {days}"
            )

    _run(report())


def main() -> None:
    parser = argparse.ArgumentParser(
        description="CareStock management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # init-db
    p_init = sub.add_parser("init-db", help="Apply database migrations")
    p_init.add_argument("--status", action="store_true", help="Show migration status only")
    p_init.add_argument("--verify", action="store_true", help="Verify schema integrity")
    p_init.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    p_init.set_defaults(func=cmd_init_db)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=None, help="Bind host (default: from settings)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: from settings)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # record
    p_record = sub.add_parser("record", help="Record a stock movement")
    p_record.add_argument("item_id", help="Catalog item ID")
    p_record.add_argument("direction", type=str.upper, choices=["IN", "OUT"], help="Movement direction")
    p_record.add_argument("quantity", type=int, help="Positive quantity")
    p_record.add_argument("--subject", default=None, help="Personal pool owner")
    p_record.add_argument("--date", default=None, help="Movement date, YYYY-MM-DD (default: today)")
    p_record.add_argument("--note", default="", help="Free-text note")
    p_record.add_argument("--enforce", action="store_true", help="Reject OUT beyond the available balance")
    p_record.set_defaults(func=cmd_record)

    # zero
    p_zero = sub.add_parser("zero", help="Zero a pool balance")
    p_zero.add_argument("item_id", help="Catalog item ID")
    p_zero.add_argument("--subject", default=None, help="Personal pool owner")
    p_zero.add_argument("--date", default=None, help="Correction date, YYYY-MM-DD (default: today)")
    p_zero.set_defaults(func=cmd_zero)

    # balance
    p_balance = sub.add_parser("balance", help="Show a pool balance")
    p_balance.add_argument("item_id", help="Catalog item ID")
    p_balance.add_argument("--subject", default=None, help="Personal pool owner")
    p_balance.add_argument("--as-of", default=None, help="Balance as of YYYY-MM-DD")
    p_balance.set_defaults(func=cmd_balance)

    # forecast
    p_forecast = sub.add_parser("forecast", help="Forecast stock depletion")
    p_forecast.add_argument("--item", default=None, help="Single item ID")
    p_forecast.add_argument("--subject", default=None, help="Personal pool owner")
    p_forecast.add_argument("--as-of", default=None, help="Evaluation date (default: today)")
    p_forecast.set_defaults(func=cmd_forecast)

    # alerts
    p_alerts = sub.add_parser("alerts", help="Collect alerts")
    p_alerts.add_argument("--feeds", action="append", default=[], help="YAML feed file (repeatable)")
    p_alerts.add_argument("--as-of", default=None, help="Evaluation date (default: today)")
    p_alerts.add_argument("--no-stock", action="store_true", help="Skip stock alerts")
    p_alerts.set_defaults(func=cmd_alerts)

    # report
    p_report = sub.add_parser("report", help="Facility inventory flow report")
    p_report.add_argument("--category", default=None, help="Restrict to one category")
    p_report.add_argument("--as-of", default=None, help="Evaluation date (default: today)")
    p_report.set_defaults(func=cmd_report)

    args = parser.parse_args()
    configure_logging()
    args.func(args)


if __name__ == "__main__":
    main()
