"""CLI for trip-settle using Typer."""

import json
import logging
import sys
from collections.abc import Mapping
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Settings, load_settings
from .models import TripSummary
from .money import format_money
from .service import settle_trip, summarize_trip
from .trip_file import load_trip
from .validation import validate_expenses

app = typer.Typer(
    name="trip-settle",
    help="Work out who owes whom after a shared trip",
)

console = Console()


def setup_logging(settings: Settings, verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format=settings.log_format)


def format_balance(
    units: int, currency: str, exponents: Mapping[str, int], use_color: bool = True
) -> str:
    """
    Format a balance in accounting style.

    Negative amounts use parentheses: (30.00 USD)
    Positive amounts have spaces:      60.00 USD
    """
    text = format_money(abs(units), currency, exponents)
    if units < 0:
        return f"([red]{text}[/red])" if use_color else f"({text})"
    if units > 0:
        return f" [green]{text}[/green] " if use_color else f" {text} "
    return f" {text} "


def _normalize_currency(currency: str | None) -> str | None:
    return currency.upper() if currency else None


def display_summary(
    summary: TripSummary, exponents: Mapping[str, int], currency: str | None = None
):
    """Display paid / owed / net tables, one per currency."""
    title = summary.title or "Trip"
    console.print(f"\n[bold]{title}[/bold] ({', '.join(summary.participants)})")

    shown = [c for c in summary.currencies if currency is None or c.currency == currency]
    if not shown:
        console.print("[yellow]No expenses recorded.[/yellow]")
        return

    for entry in shown:
        table = Table(
            title=(
                f"{entry.currency}: {entry.expense_count} expenses, "
                f"{format_money(entry.total_spent, entry.currency, exponents)} spent"
            ),
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Participant", style="cyan")
        table.add_column("Paid", justify="right")
        table.add_column("Share", justify="right")
        table.add_column("Balance", justify="right")

        for ledger in entry.ledgers:
            table.add_row(
                ledger.participant,
                format_money(ledger.paid, entry.currency, exponents),
                format_money(ledger.owed, entry.currency, exponents),
                format_balance(ledger.net, entry.currency, exponents),
            )

        console.print(table)


@app.command()
def validate(
    trip_file: Path = typer.Argument(..., dir_okay=False, help="Trip JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Check a trip file for problems without settling it."""
    try:
        settings = load_settings()
        setup_logging(settings, verbose)

        trip = load_trip(trip_file)
        result = validate_expenses(
            trip.participants, trip.expenses, exponents=settings.currency_exponents
        )
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        if verbose:
            raise
        sys.exit(1)

    if result.ok:
        console.print(
            f"[bold green]✓ Trip is valid[/bold green] "
            f"({len(trip.participants)} participants, {len(trip.expenses)} expenses)"
        )
        return

    table = Table(title="Validation Issues", show_header=True, header_style="bold red")
    table.add_column("Expense", justify="right", style="dim")
    table.add_column("Field", style="cyan")
    table.add_column("Problem")
    for issue in result.issues:
        table.add_row(
            "-" if issue.expense_index is None else str(issue.expense_index),
            issue.field,
            escape(issue.message),
        )
    console.print(table)
    sys.exit(1)


@app.command()
def balances(
    trip_file: Path = typer.Argument(..., dir_okay=False, help="Trip JSON file"),
    currency: str | None = typer.Option(
        None, "--currency", "-C", help="Only show this currency"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show what each participant paid, owes and is owed, per currency."""
    try:
        settings = load_settings()
        setup_logging(settings, verbose)

        trip = load_trip(trip_file)
        summary = summarize_trip(trip, exponents=settings.currency_exponents)
        display_summary(
            summary, settings.currency_exponents, _normalize_currency(currency)
        )

    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        if verbose:
            raise
        sys.exit(1)


@app.command()
def settle(
    trip_file: Path = typer.Argument(..., dir_okay=False, help="Trip JSON file"),
    currency: str | None = typer.Option(
        None, "--currency", "-C", help="Only settle this currency"
    ),
    as_json: bool = typer.Option(
        False, "--json", help="Print balances and transfers as JSON"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Show the transfers that settle every balance on a trip.

    Transfers are computed per currency; amounts in different currencies are
    never netted against each other.
    """
    try:
        settings = load_settings()
        setup_logging(settings, verbose)
        exponents = settings.currency_exponents

        trip = load_trip(trip_file)
        result = settle_trip(trip, exponents=exponents)

        wanted = _normalize_currency(currency)
        if wanted is not None:
            result = result.model_copy(
                update={
                    "balances": {
                        c: v for c, v in result.balances.items() if c == wanted
                    },
                    "transfers": {
                        c: t for c, t in result.transfers.items() if c == wanted
                    },
                }
            )

        if as_json:
            typer.echo(json.dumps(result.to_payload(), indent=2))
            return

        if not result.transfers:
            console.print("[yellow]Nothing to settle.[/yellow]")
            return

        for code, transfers in result.transfers.items():
            if not transfers:
                console.print(f"[green]{code}: all square[/green]")
                continue

            table = Table(
                title=f"{code} Settlement", show_header=True, header_style="bold magenta"
            )
            table.add_column("From", style="cyan")
            table.add_column("To", style="cyan")
            table.add_column("Amount", justify="right")
            for transfer in transfers:
                table.add_row(
                    transfer.sender,
                    transfer.recipient,
                    format_money(transfer.amount, code, exponents),
                )
            console.print(table)

        total = sum(len(t) for t in result.transfers.values())
        console.print(f"\n[bold green]✓ {total} transfer(s) settle the trip[/bold green]")

    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        if verbose:
            raise
        sys.exit(1)


if __name__ == "__main__":
    app()
