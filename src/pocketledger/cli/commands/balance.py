"""Balance command."""

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.ledger import LedgerService
from pocketledger.utils.amount_parser import format_cents


@click.command("balance")
@click.argument("account", metavar="ACCOUNT", required=False)
@click.pass_context
def show_balance(ctx, account: str | None):
    """Show balances.

    With ACCOUNT, print that account's balance. Without it, print every
    active account followed by the totals per currency.

    Examples:
        pocketledger balance
        pocketledger balance "Nubank"
    """
    ledger = LedgerService(ctx.obj["db"])
    owner = ctx.obj["owner"]

    if account is not None:
        account_id = resolve_account_or_exit(ctx, account)
        try:
            row = ledger.get_account_with_balance(owner, account_id)
        except ValueError as e:
            handle_domain_error(ctx, e)
        click.echo(f"{row.account.name}: {format_cents(row.balance, row.account.currency)}")
        return

    rows = ledger.list_accounts_with_balance(owner)
    if not rows:
        click.echo("No accounts found.")
        return

    click.echo("\nBalances:")
    click.echo("-" * 50)
    for row in rows:
        click.echo(f"{row.account.name:25s} {format_cents(row.balance, row.account.currency):>20s}")
    click.echo("-" * 50)
    for total in ledger.total_balances(owner):
        click.echo(f"{'Total ' + total.currency:25s} {format_cents(total.total, total.currency):>20s}")


def register_commands(cli):
    """Register balance command with main CLI."""
    cli.add_command(show_balance)
