"""Reconciliation adjustment command."""

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.cli.parsing import parse_cents_or_exit, parse_when_or_exit
from pocketledger.domain.adjustment import AdjustmentService
from pocketledger.domain.ledger import LedgerService
from pocketledger.utils.amount_parser import format_cents


@click.command("adjust")
@click.argument("account", metavar="ACCOUNT")
@click.option("--by", "diff", help="Signed difference to apply (e.g., -12.50)")
@click.option("--to", "target", help="Balance the account should end up with")
@click.option("--date", "when", default="today", show_default=True, help="Date of the adjustment")
@click.option("--note", help="Note (defaults to 'Adjustment (reconciliation)')")
@click.pass_context
def adjust_account(ctx, account: str, diff: str | None, target: str | None, when: str, note: str | None):
    """Correct an account balance to match reality.

    Give either the difference (--by) or the balance you see at the bank
    (--to); the difference is then computed from the current balance.

    Examples:
        pocketledger adjust "Nubank" --by -12.50
        pocketledger adjust "Wallet" --to 80.00 --note "Counted cash"
    """
    if (diff is None) == (target is None):
        click.echo("Error: Specify exactly one of --by or --to.", err=True)
        ctx.exit(1)

    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    account_id = resolve_account_or_exit(ctx, account)
    occurred_at = parse_when_or_exit(ctx, when)

    try:
        if diff is not None:
            diff_cents = parse_cents_or_exit(ctx, diff)
        else:
            diff_cents = parse_cents_or_exit(ctx, target) - LedgerService(db).balance_of(owner, account_id)
        movement = AdjustmentService(db).apply_adjustment(owner, account_id, diff_cents, occurred_at, note=note)
        balance = LedgerService(db).balance_of(owner, account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Adjusted by {format_cents(movement.amount)}. New balance: {format_cents(balance)}")


def register_commands(cli):
    """Register adjustment command with main CLI."""
    cli.add_command(adjust_account)
