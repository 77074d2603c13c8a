"""Utility functions for dentrack."""

from dentrack.utils.date_parser import parse_date, parse_time, get_month_range
from dentrack.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_time", "get_month_range", "parse_amount"]
