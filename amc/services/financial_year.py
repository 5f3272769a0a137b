# amc/services/financial_year.py
"""
Financial-year arithmetic.

A financial year runs May to April and is labelled ``"YYYY-YY"``
(``"2025-26"`` = May 2025 .. April 2026). Every cumulative figure in the
reports walks months in this order, never in calendar order.
"""
import re
from datetime import date

from rest_framework.exceptions import ValidationError

FY_MONTHS = [
    "MAY",
    "JUNE",
    "JULY",
    "AUGUST",
    "SEPTEMBER",
    "OCTOBER",
    "NOVEMBER",
    "DECEMBER",
    "JANUARY",
    "FEBRUARY",
    "MARCH",
    "APRIL",
]

MONTH_NUMBERS = {
    "JANUARY": 1,
    "FEBRUARY": 2,
    "MARCH": 3,
    "APRIL": 4,
    "MAY": 5,
    "JUNE": 6,
    "JULY": 7,
    "AUGUST": 8,
    "SEPTEMBER": 9,
    "OCTOBER": 10,
    "NOVEMBER": 11,
    "DECEMBER": 12,
}

MONTH_BY_NUMBER = {number: name for name, number in MONTH_NUMBERS.items()}

SEASONS = {
    "Spring": [3, 4, 5],
    "Summer": [6, 7, 8],
    "Monsoon": [9, 10, 11],
    "Winter": [12, 1, 2],
}

_FY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def is_valid_financial_year(label):
    match = _FY_PATTERN.match(label or "")
    if not match:
        return False
    start = int(match.group(1))
    return (start + 1) % 100 == int(match.group(2))


def validate_financial_year(label, field="financialYear"):
    if not is_valid_financial_year(label):
        raise ValidationError({field: f'Invalid financial year "{label}". Expected e.g. "2025-26".'})
    return label


def start_year(label):
    return int(validate_financial_year(label)[:4])


def previous_financial_year(label):
    """``"2025-26"`` -> ``"2024-25"``."""
    start = start_year(label) - 1
    return f"{start}-{(start + 1) % 100:02d}"


def financial_year_for_date(value):
    start = value.year if value.month >= 5 else value.year - 1
    return f"{start}-{(start + 1) % 100:02d}"


def normalize_month(value, field="month"):
    """Accept ``June``, ``JUNE`` or ``june``; return the upper-case name."""
    name = (value or "").strip().upper()
    if name not in MONTH_NUMBERS:
        raise ValidationError({field: f'Invalid month "{value}".'})
    return name


def display_month(name):
    return name.capitalize()


def cumulative_months(month):
    """Months from May up to and including ``month``."""
    month = normalize_month(month)
    return FY_MONTHS[: FY_MONTHS.index(month) + 1]


def month_calendar_year(label, month):
    """Calendar year in which ``month`` of financial year ``label`` falls."""
    start = start_year(label)
    return start if MONTH_NUMBERS[normalize_month(month)] >= 5 else start + 1


def financial_year_bounds(label):
    start = start_year(label)
    return date(start, 5, 1), date(start + 1, 4, 30)


def season_for_month(month_number):
    for season, months in SEASONS.items():
        if month_number in months:
            return season
    raise ValueError(f"Month out of range: {month_number}")


def quarter_for_month(month_number):
    return (month_number - 1) // 3 + 1
