"""Utility functions for pocketledger."""

from pocketledger.utils.date_parser import parse_date, parse_datetime
from pocketledger.utils.amount_parser import parse_amount, to_cents, format_cents
from pocketledger.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_datetime", "parse_amount", "to_cents", "format_cents", "resolve_account"]
