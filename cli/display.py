"""Rich terminal renderers for the RechargeEarn client."""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from modules.auth.models import User
from modules.utilities.models import CablePlan, DataPlan, MeterInfo, PurchaseConfirmation
from modules.wallet.models import Transaction
from shared.formatting import format_currency, format_date

console = Console()


def configure_logging(level: str = "WARNING") -> None:
    """Route log records through the shared console."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


def print_error(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")


def print_field_errors(fields: dict[str, str]) -> None:
    """Print one line per invalid form field."""
    for name, message in fields.items():
        console.print(f"  [red]•[/red] [bold]{name}[/bold]: {message}")


def print_success(message: str) -> None:
    console.print(f"[bold green]✓[/bold green] {message}")


def print_hint(message: str) -> None:
    console.print(f"[dim]{message}[/dim]")


def render_user(user: User) -> Panel:
    lines = [
        f"[bold]{user.full_name}[/bold] ({user.initials})",
        f"Email: {user.email}",
        f"Phone: {user.phone or '-'}",
        f"Email verified: {'yes' if user.is_email_verified else 'no'}",
    ]
    if user.created_at:
        lines.append(f"Member since: {format_date(user.created_at)}")
    return Panel("\n".join(lines), title="Profile", border_style="blue")


def render_balance(balance: Decimal, currency: str = "NGN", title: str = "Wallet Balance") -> Panel:
    return Panel(
        Text(format_currency(balance, currency), style="bold green", justify="center"),
        title=title,
        border_style="green",
    )


def render_transactions(transactions: Iterable[Transaction]) -> Table:
    """Transaction history, newest first, with recharge tokens where present."""
    table = Table(title="Transactions", show_lines=False)
    table.add_column("Date", style="dim")
    table.add_column("Category")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("Status")
    table.add_column("Reference", style="dim")

    for tx in transactions:
        sign = "+" if tx.is_credit else "-"
        style = "green" if tx.is_credit else "red"
        description = tx.description
        if tx.token:
            description = f"{description}\nToken: [bold]{tx.token}[/bold]"
        table.add_row(
            format_date(tx.created_at),
            tx.label,
            description,
            f"[{style}]{sign}{format_currency(tx.amount)}[/{style}]",
            tx.status,
            tx.reference,
        )
    return table


def render_data_plans(network: str, plans: Iterable[DataPlan]) -> Table:
    table = Table(title=f"{network} Data Plans")
    table.add_column("ID", justify="right")
    table.add_column("Plan")
    table.add_column("Size", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Status")

    for plan in plans:
        price = format_currency(plan.amount)
        if plan.strike_price is not None:
            price = f"{price} [dim strike]{format_currency(plan.strike_price)}[/dim strike]"
        table.add_row(
            str(plan.id),
            plan.name,
            f"{plan.mb_value} MB" if plan.mb_value else "",
            price,
            "[green]Available[/green]" if plan.available else "[dim]Unavailable[/dim]",
        )
    return table


def render_cable_plans(plans: Iterable[CablePlan]) -> Table:
    table = Table(title="Cable TV Plans")
    table.add_column("ID", justify="right")
    table.add_column("Plan")
    table.add_column("Provider")
    table.add_column("Price", justify="right")
    for plan in plans:
        table.add_row(str(plan.id), plan.name, plan.provider, format_currency(plan.price))
    return table


def render_meter_info(info: MeterInfo) -> Panel:
    return Panel(
        f"[bold]{info.display_name}[/bold]\n{info.display_address}",
        title="Meter Verified",
        border_style="green",
    )


def render_confirmation(confirmation: PurchaseConfirmation) -> Panel:
    """Confirmation gate shown before any charge is issued."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()
    for detail in confirmation.details:
        value = detail.value
        table.add_row(
            detail.label,
            format_currency(value) if isinstance(value, Decimal) else str(value),
        )
    table.add_row("Amount", f"[bold]{format_currency(confirmation.amount)}[/bold]")
    table.add_row("", "")
    table.add_row("[yellow]⚠[/yellow]", f"[yellow]{confirmation.warning}[/yellow]")
    return Panel(table, title=confirmation.title, border_style="yellow")


def render_token(token: Optional[str], meter_number: str) -> Panel:
    body = f"Meter: {meter_number}\n"
    if token:
        body += f"Token: [bold]{token}[/bold]"
    else:
        body += "[dim]No token returned. Check your transactions shortly.[/dim]"
    return Panel(body, title="Electricity Purchase Successful", border_style="green")


def render_referrals(
    code: Optional[str],
    total_referrals: int,
    total_rewards: Decimal,
    share_url: Optional[str],
) -> Panel:
    lines = [
        f"Code: [bold]{code or '-'}[/bold]",
        f"Referrals: {total_referrals}",
        f"Rewards: {format_currency(total_rewards)}",
    ]
    if share_url:
        lines.append(f"Share: {share_url}")
    return Panel("\n".join(lines), title="Referrals", border_style="magenta")
