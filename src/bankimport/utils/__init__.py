"""Utility functions for bankimport."""

from bankimport.utils.date_parser import DateLocale, parse_statement_date
from bankimport.utils.amount_parser import parse_amount

__all__ = ["DateLocale", "parse_statement_date", "parse_amount"]
