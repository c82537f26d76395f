"""
Command line entry point: import one order payload into the configured database.

Examples:
  # Import as a regular API caller
  order-import payload.json

  # Import as an administrator against a scratch database
  order-import payload.json --admin --database-url sqlite+aiosqlite:///./scratch.db --create-schema
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.table import Table

from order_import.core.config import get_settings
from order_import.core.logging_config import setup_logging
from order_import.db import ConnDB, OrderRepository, ReferenceRepository
from order_import.domain.models import OrderDomain
from order_import.services.orders import ImportContext, create_orchestrator
from order_import.utils.error_handler import AppException, create_error_response

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="order-import",
        description="Build a complete order from an external JSON payload",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument("payload", type=Path, help="JSON file with the order payload ('-' for stdin)")
    parser.add_argument("--admin", action="store_true", help="Import with administrator privileges")
    parser.add_argument("--role", action="append", default=[], help="Role granted to the caller (repeatable)")
    parser.add_argument("--user-id", help="Caller ID recorded in logs")
    parser.add_argument("--database-url", help="SQLAlchemy async URL (defaults to DATABASE_URL)")
    parser.add_argument("--create-schema", action="store_true", help="Create missing tables before importing")
    parser.add_argument("--summary", action="store_true", help="Print a table instead of JSON")
    return parser


def load_payload(path: Path) -> dict[str, Any]:
    raw = sys.stdin.read() if str(path) == "-" else path.read_text(encoding="utf-8")
    payload = json.loads(raw)
    # API clients usually wrap the payload in {"order": {...}}
    if isinstance(payload, dict) and set(payload) == {"order"}:
        payload = payload["order"]
    return payload


def render_summary(order: OrderDomain) -> Table:
    summary = order.summary()
    table = Table(title=f"Order {summary['number']}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key in ("id", "state", "channel", "email", "completed_at", "currency", "item_count"):
        table.add_row(key, str(summary[key]))
    for key in ("item_total", "adjustment_total", "payment_total", "total"):
        table.add_row(key, summary[key], style="bold")
    table.add_row("shipments", str(len(summary["shipments"])))
    table.add_row("payments", str(len(summary["payments"])))
    table.add_row("adjustments", str(len(summary["adjustments"])))
    return table


async def run_import(args: argparse.Namespace) -> int:
    """Run one import; returns the process exit code."""
    settings = get_settings()

    roles = set(args.role)
    if args.admin:
        roles.add(settings.ADMIN_ROLE)
    context = ImportContext(user_id=args.user_id, roles=frozenset(roles), admin_role=settings.ADMIN_ROLE)

    try:
        payload = load_payload(args.payload)
    except (OSError, json.JSONDecodeError) as e:
        error_console.print(f"[red]Could not read payload {args.payload}: {e}[/red]")
        return 2

    conn_db = ConnDB(database_url=args.database_url)
    try:
        await conn_db.initialize()
        if args.create_schema:
            await conn_db.create_schema()

        orchestrator = create_orchestrator(
            order_repo=OrderRepository(conn_db),
            reference_repo=ReferenceRepository(conn_db),
            settings=settings,
        )
        order = await orchestrator.import_order(payload, context)

    except AppException as e:
        error_console.print_json(data=create_error_response(e), default=str)
        return 1
    finally:
        await conn_db.close()

    if args.summary:
        console.print(render_summary(order))
    else:
        console.print_json(data=order.summary())
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main execution function."""
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        exit_code = asyncio.run(run_import(args))
    except KeyboardInterrupt:
        logger.warning("Operation interrupted by user")
        exit_code = 130

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
