"""Utility functions for tallybook."""

from tallybook.utils.date_parser import parse_date, get_date_range, iter_months
from tallybook.utils.amount_parser import parse_amount, format_amount
from tallybook.utils.account_resolver import resolve_account

__all__ = ["parse_date", "get_date_range", "iter_months", "parse_amount", "format_amount", "resolve_account"]
