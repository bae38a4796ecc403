"""CLI helpers for account resolution."""

from __future__ import annotations

import click
from pocketledger.domain.account import AccountService
from pocketledger.utils.account_resolver import resolve_account


def resolve_account_or_exit(ctx: click.Context, account: str) -> str:
    """Resolve account name or ID for the current owner, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    service = AccountService(ctx.obj["db"])
    try:
        return resolve_account(service, ctx.obj["owner"], account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
