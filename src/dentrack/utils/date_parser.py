"""Date and time parsing utilities."""

from datetime import date, datetime, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "next monday", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    days = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
    if date_str.startswith("next ") and date_str[5:] in days:
        # Next Monday, etc. Never today.
        days_ahead = (days.index(date_str[5:]) - today.weekday()) % 7
        return today + timedelta(days=days_ahead or 7)

    if date_str.startswith("last ") and date_str[5:] in days:
        days_ago = (today.weekday() - days.index(date_str[5:])) % 7
        return today - timedelta(days=days_ago or 7)

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_time(time_str: str) -> str:
    """Parse a time of day into 24-hour "HH:MM" form.

    Accepts "9:30", "09:30", "2pm", "2:15 PM" and similar.

    Raises:
        ValueError: If time string cannot be parsed
    """
    try:
        dt = date_parser.parse(time_str.strip(), default=datetime(2000, 1, 1))
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse time '{time_str}': {e}")
    return dt.strftime("%H:%M")


def get_month_range(day: date) -> tuple[date, date]:
    """Get the first and last day of the calendar month containing day.

    Args:
        day: Any day of the month

    Returns:
        Tuple of (first_day, last_day)
    """
    start_date = day.replace(day=1)
    # Last day of the month (day before first day of next month)
    end_date = start_date + relativedelta(months=1) - timedelta(days=1)
    return (start_date, end_date)
