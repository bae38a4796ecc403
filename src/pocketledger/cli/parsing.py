"""CLI helpers for parsing amounts and dates."""

from datetime import datetime

import click

from pocketledger.utils.amount_parser import parse_amount, to_cents
from pocketledger.utils.date_parser import parse_datetime


def parse_cents_or_exit(ctx: click.Context, value: str) -> int:
    """Parse an amount typed in major units (e.g. "12.34") into cents."""
    try:
        return to_cents(parse_amount(value))
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def parse_when_or_exit(ctx: click.Context, value: str) -> datetime:
    """Parse a date or timestamp option ("2024-01-15", "today", ISO-8601)."""
    try:
        return parse_datetime(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)
