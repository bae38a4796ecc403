"""Transfer commands."""

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.cli.parsing import parse_when_or_exit
from pocketledger.domain.account import AccountService
from pocketledger.domain.transfer import TransferService
from pocketledger.utils.amount_parser import format_cents, parse_amount


def _parse_amount_or_exit(ctx, amount: str):
    try:
        return parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@click.group()
def transfer_group():
    """Move money between your accounts."""
    pass


@transfer_group.command("create")
@click.argument("from_account", metavar="FROM_ACCOUNT")
@click.argument("to_account", metavar="TO_ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.option("--date", "when", default="today", show_default=True, help="Transfer date")
@click.option("--description", help="Transfer description")
@click.pass_context
def create_transfer(ctx, from_account: str, to_account: str, amount: str, when: str, description: str | None):
    """Transfer AMOUNT from one account to another.

    Examples:
        pocketledger transfer create "Nubank" "Wallet" 200.00
        pocketledger transfer create "Nubank" "Savings" 1000 --date 2024-02-01 --description "Monthly savings"
    """
    service = TransferService(ctx.obj["db"])
    from_id = resolve_account_or_exit(ctx, from_account)
    to_id = resolve_account_or_exit(ctx, to_account)
    occurred_at = parse_when_or_exit(ctx, when)

    try:
        transfer = service.create_transfer(
            ctx.obj["owner"],
            from_id,
            to_id,
            amount=_parse_amount_or_exit(ctx, amount),
            occurred_at=occurred_at,
            description=description,
        )
        click.echo(f"Transferred {format_cents(transfer.amount)} (ID: {transfer.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transfer_group.command("list")
@click.pass_context
def list_transfers(ctx):
    """List transfers by date."""
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    transfers = TransferService(db).list_transfers(owner)
    if not transfers:
        click.echo("No transfers found.")
        return

    names = {acc.id: acc.name for acc in AccountService(db).list_accounts(owner, include_archived=True)}
    click.echo("\nTransfers:")
    click.echo("-" * 90)
    for t in transfers:
        route = f"{names.get(t.from_account_id, t.from_account_id)} -> {names.get(t.to_account_id, t.to_account_id)}"
        click.echo(
            f"{t.occurred_at.date().isoformat()} | {route:35s} | {format_cents(t.amount):>12s} | "
            f"{t.description or ''} | ID: {t.id}"
        )


@transfer_group.command("update")
@click.argument("transfer_id", metavar="TRANSFER_ID")
@click.option("--from", "from_account", help="New source account name or ID")
@click.option("--to", "to_account", help="New destination account name or ID")
@click.option("--amount", help="New amount (e.g., 250.00)")
@click.option("--date", "when", help="New date")
@click.option("--description", help="New description")
@click.pass_context
def update_transfer(
    ctx,
    transfer_id: str,
    from_account: str | None,
    to_account: str | None,
    amount: str | None,
    when: str | None,
    description: str | None,
):
    """Update a transfer.

    Updates only the fields that are provided; both account movements are
    rewritten when the amount, an account or the date changes.
    """
    service = TransferService(ctx.obj["db"])
    from_id = resolve_account_or_exit(ctx, from_account) if from_account is not None else None
    to_id = resolve_account_or_exit(ctx, to_account) if to_account is not None else None
    new_amount = _parse_amount_or_exit(ctx, amount) if amount is not None else None
    occurred_at = parse_when_or_exit(ctx, when) if when is not None else None

    try:
        transfer = service.update_transfer(
            ctx.obj["owner"],
            transfer_id,
            from_account_id=from_id,
            to_account_id=to_id,
            amount=new_amount,
            occurred_at=occurred_at,
            description=description,
        )
        click.echo(f"Updated transfer {transfer.id}: {format_cents(transfer.amount)}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transfer_group.command("delete")
@click.argument("transfer_id", metavar="TRANSFER_ID")
@click.pass_context
def delete_transfer(ctx, transfer_id: str):
    """Delete a transfer and both of its movements."""
    service = TransferService(ctx.obj["db"])

    result = service.delete_transfer(ctx.obj["owner"], transfer_id)
    if not result.found:
        click.echo(f"Error: Transfer {transfer_id} not found", err=True)
        ctx.exit(1)
    click.echo(f"Deleted transfer {transfer_id}")


def register_commands(cli):
    """Register transfer commands with main CLI."""
    cli.add_command(transfer_group, name="transfer")
