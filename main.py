"""
RechargeEarn - terminal client for the RechargeEarn bill-payment service.

Buy airtime, data, electricity and cable TV from a wallet funded through
the payment gateway, and earn referral rewards. The session is kept in a
local store between runs; `serve` starts the landing server the gateway
redirects back to.
"""

import argparse
import asyncio
import sys
import webbrowser
from typing import Optional

from api.dependencies import ServiceContainer, set_container
from cli.commands import COMMANDS
from cli.display import configure_logging, console, print_error
from shared.config import get_settings
from shared.exceptions import RechargeError
from shared.navigation import Navigator, set_navigator
from shared.storage import JsonFileStorage


def open_browser(url: str) -> None:
    """Leave the terminal for an external page (payment gateway)."""
    console.print(f"[dim]Opening {url}[/dim]")
    webbrowser.open(url)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rechargeearn",
        description="Pay bills and top up from your RechargeEarn wallet",
    )
    parser.add_argument("--log-level", help="Logging level (default: from settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    # Account
    p = sub.add_parser("register", help="Create an account (sends an email code)")
    p.add_argument("--first-name")
    p.add_argument("--last-name")
    p.add_argument("--email")
    p.add_argument("--password")
    p.add_argument("--referral", "--ref", dest="referral", help="6-character referral code")
    p.add_argument("--link", help="Referral link you were sent (.../register?ref=CODE)")

    p = sub.add_parser("verify-otp", help="Finish registration with the emailed code")
    p.add_argument("--email", required=True)
    p.add_argument("--otp")
    p.add_argument("--phone")

    p = sub.add_parser("resend-otp", help="Send a new registration code")
    p.add_argument("--email", required=True)

    p = sub.add_parser("login", help="Sign in")
    p.add_argument("--email")
    p.add_argument("--password")

    sub.add_parser("logout", help="Sign out and forget the session")
    sub.add_parser("profile", help="Show your profile")

    p = sub.add_parser("change-password", help="Change your password")
    p.add_argument("--current-password")
    p.add_argument("--new-password")
    p.add_argument("--confirm-password")

    for name, help_text in (
        ("forgot-password", "Email a reset code, then set a new password"),
        ("reset-password", "Set a new password with a code you already have"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--email")
        p.add_argument("--otp")
        p.add_argument("--new-password")
        p.add_argument("--confirm-password")

    # Wallet
    sub.add_parser("dashboard", help="Greeting and wallet balance")

    p = sub.add_parser("wallet", help="Balance and recent transactions")
    p.add_argument("--category", default="all", help="Filter by category (default: all)")

    p = sub.add_parser("fund", help="Top up the wallet through the payment gateway")
    p.add_argument("amount", help="Amount in Naira (minimum 100)")
    p.add_argument("--email", help="Receipt email (default: your account email)")

    p = sub.add_parser("verify-payment", help="Confirm a gateway payment")
    p.add_argument("--reference")

    # Utilities
    p = sub.add_parser("data", help="List or buy data plans")
    p.add_argument("action", choices=["plans", "buy"])
    p.add_argument("--network", default="MTN", help="MTN, AIRTEL, GLO or 9MOBILE")
    p.add_argument("--plan", type=int, help="Plan ID (for buy)")
    p.add_argument("--phone")
    p.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    p = sub.add_parser("airtime", help="Buy airtime")
    p.add_argument("--amount", help="Minimum 50")
    p.add_argument("--phone")
    p.add_argument("--network", default="MTN")

    p = sub.add_parser("electricity", help="Verify a meter and buy electricity")
    p.add_argument("--meter")
    p.add_argument("--provider", default="AEDC")
    p.add_argument("--type", dest="plan_type", choices=["prepaid", "postpaid"], default="prepaid")
    p.add_argument("--amount", help="Minimum 100")
    p.add_argument("--phone", help="Default: your account phone")
    p.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    p = sub.add_parser("cable", help="List or buy cable TV plans")
    p.add_argument("--plan", type=int, help="Plan ID (omit to list plans)")
    p.add_argument("--smartcard")

    p = sub.add_parser("transaction", help="Look up a transaction (and any token) by reference")
    p.add_argument("reference", nargs="?")

    sub.add_parser("referrals", help="Your referral code and rewards")

    # Landing server
    p = sub.add_parser("serve", help="Run the payment landing server")
    p.add_argument("--host")
    p.add_argument("--port", type=int)
    p.add_argument("--reload", action="store_true")

    return parser


async def run_command(container: ServiceContainer, args: argparse.Namespace) -> int:
    handler = COMMANDS[args.command]
    try:
        return await handler(container, args)
    finally:
        await container.aclose()


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    if args.command == "serve":
        from run_landing import main as run_landing

        forwarded = []
        if args.host:
            forwarded += ["--host", args.host]
        if args.port:
            forwarded += ["--port", str(args.port)]
        if args.reload:
            forwarded.append("--reload")
        run_landing(forwarded)
        return 0

    navigator = Navigator(on_external=open_browser)
    set_navigator(navigator)
    container = ServiceContainer(
        storage=JsonFileStorage(settings.storage_path),
        navigator=navigator,
        settings=settings,
    )
    set_container(container)

    try:
        return asyncio.run(run_command(container, args))
    except RechargeError as e:
        print_error(e.message)
        return 1
    except KeyboardInterrupt:
        console.print("\n[dim]Cancelled[/dim]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
