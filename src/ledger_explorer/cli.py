"""Command line interface for ledger_explorer utilities."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ledger_explorer.account.view import AccountView
from ledger_explorer.context import ExplorerContext, build_context
from ledger_explorer.logging_config import configure_logging
from ledger_explorer.time_machine import ValidationFailure, validate_instant


def _print_error(message: str) -> int:
    """Print an error message and return a non-zero exit code."""

    print(message)
    return 1


def _parse_instant(value: str) -> datetime:
    instant = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


async def _load_view(
    context: ExplorerContext, address: str, currency: Optional[str], at: Optional[datetime]
) -> AccountView:
    view = context.open_view(address, currency=currency, initial_instant=at)
    view.start()
    try:
        await view.settle()
    finally:
        view.close()
    return view


def _view_summary(view: AccountView) -> Dict[str, Any]:
    snapshot = view.snapshot
    return {
        "address": view.display_identity.address,
        "username": view.display_identity.username,
        "service": view.display_identity.service,
        "selection": str(view.time_selection),
        "currency": view.currency,
        "activated": snapshot.ledger_info.activated if snapshot and snapshot.ledger_info else None,
        "blackholed": snapshot.ledger_info.blackholed if snapshot and snapshot.ledger_info else None,
        "balances": asdict(view.balances) if view.balances else None,
        "fiat_rate": view.fiat_rate,
        "fiat_balances": view.fiat_balances,
    }


def _account_command(args: argparse.Namespace) -> int:
    """Load one account view and print its derived state as JSON."""

    at: Optional[datetime] = None
    if args.at:
        try:
            at = validate_instant(_parse_instant(args.at))
        except ValueError as exc:
            # ValidationFailure is a ValueError, as is a malformed timestamp.
            if isinstance(exc, ValidationFailure):
                return _print_error(f"Invalid instant: {exc}")
            return _print_error(f"Could not parse instant '{args.at}': {exc}")

    context = build_context()
    view = asyncio.run(_load_view(context, args.address, args.currency, at))

    if view.error_message:
        return _print_error(view.error_message)
    if view.snapshot is None:
        return _print_error("Error")

    print(json.dumps(_view_summary(view), indent=2, default=str))
    return 0


def _currency_command(args: argparse.Namespace) -> int:
    context = build_context()
    selected = context.select_currency(args.code)
    print(f"Selected currency: {selected}")
    return 0


def _sign_out_command(_: argparse.Namespace) -> int:
    context = build_context()
    context.coordinator.sign_out()
    print("Signed out.")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger-explorer",
        description="Inspect ledger accounts, live or as of a past instant.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level for structured logs written to stderr (defaults to WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    account_parser = subparsers.add_parser(
        "account", help="Show balances and details for an account"
    )
    account_parser.add_argument("address", help="Account address to look up")
    account_parser.add_argument(
        "--at",
        help="ISO-8601 instant to view the account at (time machine); defaults to live",
    )
    account_parser.add_argument(
        "--currency", help="Fiat currency code (defaults to the saved selection)"
    )
    account_parser.set_defaults(func=_account_command)

    currency_parser = subparsers.add_parser(
        "currency", help="Save the selected fiat currency"
    )
    currency_parser.add_argument("code", help="Currency code, e.g. usd or eur")
    currency_parser.set_defaults(func=_currency_command)

    sign_out_parser = subparsers.add_parser(
        "sign-out", help="Forget the signed-in account"
    )
    sign_out_parser.set_defaults(func=_sign_out_command)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the `ledger-explorer` console script."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))
    command: Callable[[argparse.Namespace], int] = getattr(args, "func")
    return command(args)


if __name__ == "__main__":
    sys.exit(main())
