"""Opening balance commands."""

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.cli.parsing import parse_cents_or_exit, parse_when_or_exit
from pocketledger.domain.account import AccountService
from pocketledger.domain.opening import OpeningService
from pocketledger.utils.amount_parser import format_cents


@click.group()
def opening_group():
    """Manage opening balances."""
    pass


@opening_group.command("set")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.option("--date", "when", default="today", show_default=True, help="Date the balance applied from")
@click.option("--note", help="Note (defaults to 'Opening balance')")
@click.pass_context
def set_opening(ctx, account: str, amount: str, when: str, note: str | None):
    """Declare the starting balance of an account.

    Nothing changes if the account already has an opening balance; use
    'opening update' for that. Put negative amounts after "--".

    Examples:
        pocketledger opening set "Nubank" 1500.00 --date 2024-01-01
        pocketledger opening set --date 2024-01-01 "Card" -- -320.50
    """
    service = OpeningService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    amount_cents = parse_cents_or_exit(ctx, amount)
    occurred_at = parse_when_or_exit(ctx, when)

    try:
        existing = service.get_opening(ctx.obj["owner"], account_id)
        opening = service.ensure_opening(ctx.obj["owner"], account_id, amount_cents, occurred_at, note=note)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if existing is not None:
        click.echo(f"Account already has an opening balance of {format_cents(opening.amount)}")
    else:
        click.echo(f"Set opening balance to {format_cents(opening.amount)}")


@opening_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_opening(ctx, account: str):
    """Show the opening balance of an account."""
    service = OpeningService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)

    try:
        opening = service.get_opening(ctx.obj["owner"], account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if opening is None:
        click.echo("No opening balance set.")
        return
    click.echo(f"Amount: {format_cents(opening.amount)}")
    click.echo(f"Date: {opening.occurred_at.date().isoformat()}")
    click.echo(f"Note: {opening.note or ''}")


@opening_group.command("list")
@click.pass_context
def list_openings(ctx):
    """List opening balances of all accounts."""
    service = OpeningService(ctx.obj["db"])

    summaries = service.list_openings(ctx.obj["owner"])
    if not summaries:
        click.echo("No opening balances found.")
        return

    click.echo("\nOpening balances:")
    click.echo("-" * 70)
    for summary in summaries:
        click.echo(
            f"{summary.account_name:20s} | {summary.opening.occurred_at.date().isoformat()} | "
            f"{format_cents(summary.opening.amount, summary.account_currency):>18s}"
        )


@opening_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--amount", help="New amount (e.g., 1500.00)")
@click.option("--date", "when", help="New date")
@click.option("--note", help="New note")
@click.pass_context
def update_opening(ctx, account: str, amount: str | None, when: str | None, note: str | None):
    """Change the opening balance of an account.

    Only possible while the opening is the account's only movement.
    """
    service = OpeningService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    amount_cents = parse_cents_or_exit(ctx, amount) if amount is not None else None
    occurred_at = parse_when_or_exit(ctx, when) if when is not None else None

    try:
        opening = service.update_opening(
            ctx.obj["owner"], account_id, amount_cents=amount_cents, occurred_at=occurred_at, note=note
        )
        click.echo(f"Updated opening balance to {format_cents(opening.amount)}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@opening_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def delete_opening(ctx, account: str):
    """Remove the opening balance of an account.

    Only possible while the opening is the account's only movement.
    """
    service = OpeningService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    account_obj = AccountService(ctx.obj["db"]).get_account(ctx.obj["owner"], account_id)

    try:
        service.delete_opening(ctx.obj["owner"], account_id)
        click.echo(f"Deleted opening balance of '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register opening balance commands with main CLI."""
    cli.add_command(opening_group, name="opening")
