#!/usr/bin/env python3
"""
Storefront client management CLI.

Usage:
    python manage.py check                 Probe the candidate API endpoints
    python manage.py products              List products (sample data if offline)
    python manage.py sales                 List sales (sample data if offline)
    python manage.py delete products 12    Delete a record by id

Every command accepts --candidate URL (repeatable) to override the
configured endpoint list and --offline to skip the network entirely.
"""

import argparse
import asyncio
import sys

from src.application.use_cases import (
    CheckConnectionUseCase,
    DeleteRecordUseCase,
    ListProductsUseCase,
    ListSalesUseCase,
)
from src.config import configure_logging
from src.core.entities.outcome import OutcomeKind, RemoteFailure
from src.core.services.resources import PRODUCTS, SALES
from src.infrastructure.http.endpoint_session import EndpointSession


def _session(args: argparse.Namespace) -> EndpointSession:
    session = EndpointSession(args.candidate or None, probe_timeout=args.timeout)
    if args.offline:
        session.go_offline()
    return session


def _print_notice(degraded: bool, notice: str | None) -> None:
    if degraded:
        print(f"[offline] {notice or 'showing sample data'}")


async def cmd_check(args: argparse.Namespace) -> int:
    async with _session(args) as session:
        report = await CheckConnectionUseCase(session).execute()
    print(report.message)
    for url in report.attempted:
        print(f"  tried: {url}")
    return 0 if report.online else 1


async def cmd_products(args: argparse.Namespace) -> int:
    async with _session(args) as session:
        result = await ListProductsUseCase(session).execute()
    _print_notice(result.degraded, result.notice)
    if not result.products:
        print("No products available.")
    for product in result.products:
        print(f"{product.id!s:>8}  {product.name:<30} ${product.price:>10.2f}  stock {product.stock}")
    return 0


async def cmd_sales(args: argparse.Namespace) -> int:
    async with _session(args) as session:
        result = await ListSalesUseCase(session).execute()
    _print_notice(result.degraded, result.notice)
    if not result.sales:
        print("No sales recorded.")
    for sale in result.sales:
        when = sale.date.strftime("%Y-%m-%d %H:%M") if sale.date else "-"
        print(f"{sale.id!s:>8}  {when:<16}  {sale.customer:<25} ${sale.total:>10.2f}  {sale.status}")
    if result.sales:
        print(f"Total: ${result.revenue:.2f}")
    return 0


async def cmd_delete(args: argparse.Namespace) -> int:
    async with _session(args) as session:
        # Deletes act on records the user has seen
        await session.fetch_collection(args.resource)
        outcome = await DeleteRecordUseCase(args.resource, session).execute(args.record_id)
    if outcome.kind == OutcomeKind.REMOTE_SUCCESS:
        print(f"Deleted {args.resource} {args.record_id}.")
        return 0
    if outcome.kind == OutcomeKind.LOCAL_ONLY_SUCCESS:
        print(f"Removed {args.resource} {args.record_id} locally (offline, not persisted).")
        return 0
    reason = outcome.reason if isinstance(outcome, RemoteFailure) else outcome.kind.value
    print(f"Error: could not delete {args.resource} {args.record_id}: {reason}")
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Storefront client management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--candidate",
        action="append",
        metavar="URL",
        help="API base URL to try, in order (repeatable; default: configured list)",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Per-probe timeout in seconds")
    parser.add_argument("--offline", action="store_true", help="Work offline with sample data")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log session events at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    # check
    p_check = sub.add_parser("check", help="Probe the candidate endpoints")
    p_check.set_defaults(func=cmd_check)

    # products
    p_products = sub.add_parser("products", help="List products")
    p_products.set_defaults(func=cmd_products)

    # sales
    p_sales = sub.add_parser("sales", help="List sales")
    p_sales.set_defaults(func=cmd_sales)

    # delete
    p_delete = sub.add_parser("delete", help="Delete a product or sale")
    p_delete.add_argument("resource", choices=[PRODUCTS, SALES])
    p_delete.add_argument("record_id", help="Record identifier")
    p_delete.set_defaults(func=cmd_delete)

    args = parser.parse_args()
    if args.offline and args.command == "check":
        parser.error("--offline cannot be combined with check, which probes the network")
    configure_logging("DEBUG" if args.verbose else None)
    sys.exit(asyncio.run(args.func(args)))


if __name__ == "__main__":
    main()
