"""
Human-readable renderings of day counts and amounts.
"""

from datetime import date
from typing import Dict

from . import Frequency
from .models import as_date
from .recurrence import add_step


_LABELS: Dict[str, Dict[str, str]] = {
    "en": {
        "today": "Today",
        "tomorrow": "Tomorrow",
        "day": "day", "days": "days",
        "week": "week", "weeks": "weeks",
        "month": "month", "months": "months",
        "year": "year", "years": "years",
    },
    "fr": {
        "today": "Aujourd'hui",
        "tomorrow": "Demain",
        "day": "jour", "days": "jours",
        "week": "semaine", "weeks": "semaines",
        "month": "mois", "months": "mois",
        "year": "an", "years": "ans",
    },
}

THOUSANDS_SEPARATORS = {"space": " ", "comma": ",", "dot": ".", "none": ""}
DECIMAL_SEPARATORS = {"comma": ",", "dot": "."}

# Currencies displayed without minor units
ZERO_DECIMAL_SYMBOLS = {"¥"}


def days_until(target, today) -> int:
    """Signed number of calendar days from today to target."""
    return (as_date(target) - as_date(today)).days


def _unit(labels: Dict[str, str], count: int, singular: str) -> str:
    return f"{count} {labels[singular] if count == 1 else labels[singular + 's']}"


def _whole_steps(start: date, target: date, frequency: Frequency) -> int:
    count = 0
    while add_step(start, frequency, count + 1) <= target:
        count += 1
    return count


def format_days_remaining(target, today, language: str = "en") -> str:
    """
    Describe the distance to a date the way the dashboard shows it.

    Under a week the day count is shown; beyond that only the most
    significant whole unit (years, then months, then weeks). Past dates
    show the absolute number of days.
    """
    labels = _LABELS.get(language, _LABELS["en"])
    target = as_date(target)
    today = as_date(today)
    diff = (target - today).days

    if diff < 0:
        return _unit(labels, abs(diff), "day")
    if diff == 0:
        return labels["today"]
    if diff == 1:
        return labels["tomorrow"]
    if diff < 7:
        return _unit(labels, diff, "day")

    years = _whole_steps(today, target, Frequency.YEARLY)
    if years:
        return _unit(labels, years, "year")

    months = _whole_steps(today, target, Frequency.MONTHLY)
    if months:
        return _unit(labels, months, "month")

    weeks = _whole_steps(today, target, Frequency.WEEKLY)
    return _unit(labels, weeks, "week")


def format_currency(amount: float,
                    symbol: str = "$",
                    language: str = "en",
                    thousands_separator: str = "comma",
                    decimal_separator: str = "dot") -> str:
    """
    Format an amount with the configured symbol and separators.

    The symbol follows the amount in French and precedes it otherwise.
    """
    digits = 0 if symbol in ZERO_DECIMAL_SYMBOLS else 2
    raw = f"{abs(amount):,.{digits}f}"
    integer_part, _, fraction = raw.partition(".")

    group = THOUSANDS_SEPARATORS.get(thousands_separator, ",")
    integer_part = integer_part.replace(",", group)

    formatted = integer_part
    if fraction:
        formatted += DECIMAL_SEPARATORS.get(decimal_separator, ".") + fraction
    if amount < 0 and float(raw.replace(",", "")) != 0:
        formatted = "-" + formatted

    if language == "fr":
        return f"{formatted} {symbol}"
    return f"{symbol}{formatted}"
