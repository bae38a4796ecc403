"""Account management commands."""

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.account import AccountService, DEFAULT_CURRENCY
from pocketledger.domain.entities import AccountType
from pocketledger.domain.ledger import LedgerService
from pocketledger.domain.opening import OpeningService
from pocketledger.utils.amount_parser import format_cents

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default=AccountType.BANK.value, show_default=True)
@click.option("--currency", default=DEFAULT_CURRENCY, show_default=True, help="Three-letter currency code")
@click.pass_context
def create_account(ctx, name: str, account_type: str, currency: str):
    """Create a new account.

    Examples:
        pocketledger account create "Nubank"
        pocketledger account create "Wallet" --type cash
        pocketledger account create "Travel Card" --type credit_card --currency USD
    """
    service = AccountService(ctx.obj["db"])

    try:
        account = service.create_account(ctx.obj["owner"], name=name, type=account_type, currency=currency)
        click.echo(f"Created account '{account.name}' (ID: {account.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--all", "include_archived", is_flag=True, help="Include archived accounts")
@click.pass_context
def list_accounts(ctx, include_archived: bool):
    """List accounts with their balances, newest first."""
    ledger = LedgerService(ctx.obj["db"])

    rows = ledger.list_accounts_with_balance(ctx.obj["owner"], include_archived=include_archived)
    if not rows:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for row in rows:
        acc = row.account
        status = " (archived)" if acc.is_archived else ""
        click.echo(
            f"{acc.name:20s} | {acc.type.value:11s} | {format_cents(row.balance, acc.currency):>18s} | ID: {acc.id}{status}"
        )


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.option("--movements", "show_movements", is_flag=True, help="Also list the account's movements")
@click.pass_context
def show_account(ctx, account: str, show_movements: bool):
    """Show one account with its balance and opening.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    account_id = resolve_account_or_exit(ctx, account)
    ledger = LedgerService(db)

    try:
        row = ledger.get_account_with_balance(owner, account_id)
        opening = OpeningService(db).get_opening(owner, account_id)
        movements = ledger.list_movements(owner, account_id) if show_movements else []
    except ValueError as e:
        handle_domain_error(ctx, e)

    acc = row.account
    click.echo(f"Account: {acc.name}")
    click.echo(f"ID: {acc.id}")
    click.echo(f"Type: {acc.type.value}")
    click.echo(f"Currency: {acc.currency}")
    click.echo(f"Status: {'archived' if acc.is_archived else 'active'}")
    click.echo(f"Balance: {format_cents(row.balance, acc.currency)}")
    if opening is not None:
        click.echo(
            f"Opening: {format_cents(opening.amount, acc.currency)} on {opening.occurred_at.date().isoformat()}"
        )
    else:
        click.echo("Opening: none")

    if show_movements:
        click.echo("\nMovements:")
        click.echo("-" * 80)
        if not movements:
            click.echo("No movements.")
        for movement in movements:
            click.echo(
                f"{movement.occurred_at.date().isoformat()} | {movement.source_type.value:15s} | "
                f"{format_cents(movement.amount):>14s} | {movement.note or ''}"
            )


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="New account type")
@click.option("--currency", help="New currency code")
@click.pass_context
def update_account(ctx, account: str, name: str | None, account_type: str | None, currency: str | None) -> None:
    """Update name, type or currency of an account.

    ACCOUNT can be an account name or ID.

    Examples:
        pocketledger account update "Nubank" --name "Nubank Checking"
        pocketledger account update "Wallet" --currency USD
    """
    if name is None and account_type is None and currency is None:
        click.echo("Error: Nothing to update. Use --name, --type or --currency.", err=True)
        ctx.exit(1)

    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)

    try:
        updated = service.update_account(
            ctx.obj["owner"], account_id, name=name, type=account_type, currency=currency
        )
        click.echo(f"Updated account '{updated.name}' ({updated.type.value}, {updated.currency})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("archive")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def archive_account(ctx, account: str) -> None:
    """Archive an account. Its history stays in the ledger."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)

    try:
        archived = service.archive_account(ctx.obj["owner"], account_id)
        click.echo(f"Archived account '{archived.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("unarchive")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def unarchive_account(ctx, account: str) -> None:
    """Reactivate an archived account."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)

    try:
        restored = service.unarchive_account(ctx.obj["owner"], account_id)
        click.echo(f"Unarchived account '{restored.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    Only accounts without any movement can be deleted. Archive accounts
    that have history instead.

    Examples:
        pocketledger account delete "Old Wallet"
        pocketledger account delete "Old Wallet" --yes
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    account_obj = service.get_account(ctx.obj["owner"], account_id)

    if not yes and not click.confirm(f"Are you sure you want to delete account '{account_obj.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(ctx.obj["owner"], account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
