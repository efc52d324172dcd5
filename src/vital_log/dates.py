"""Fechas DD.MM.AAAA: parseo, validacion y orden cronologico de lecturas."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime

from vital_log.model import HealthEntry, Language
from vital_log.translations import weekday_label

DATE_FORMAT = "%d.%m.%Y"

_DATE_RX = re.compile(r"^\d{2}\.\d{2}\.\d{4}$")


def parse_date(text: str | None) -> date | None:
    """Parse DD.MM.YYYY into a date.

    Returns:
        The calendar date, or None (invalid sentinel) for anything that is
        not a real date. Never raises.
    """
    if not text or not _DATE_RX.match(text):
        return None
    day, month, year = (int(part) for part in text.split("."))
    try:
        return date(year, month, day)
    except ValueError:
        return None


def is_valid_date(text: str | None) -> bool:
    """True si el texto es DD.MM.AAAA estricto y una fecha real."""
    return parse_date(text) is not None


def format_date(value: date) -> str:
    """Formatea una fecha como DD.MM.AAAA."""
    return value.strftime(DATE_FORMAT)


def today_text() -> str:
    """Fecha local de hoy como DD.MM.AAAA."""
    return format_date(datetime.now().date())


def date_sort_key(text: str) -> tuple[int, date]:
    """Clave de orden de una fecha; las invalidas van al final."""
    parsed = parse_date(text)
    if parsed is None:
        return (1, date.max)
    return (0, parsed)


def entry_sort_key(entry: HealthEntry) -> tuple[int, date, int, int]:
    """Total order key: date, then slot rank, then creation time."""
    invalid, day = date_sort_key(entry.date)
    return (invalid, day, entry.time_slot.rank, entry.created_at)


def sort_entries(entries: Iterable[HealthEntry]) -> list[HealthEntry]:
    """Return a new list in chronological order (stable)."""
    return sorted(entries, key=entry_sort_key)


def unique_dates(
    entries: Iterable[HealthEntry], *, newest_first: bool = False
) -> list[str]:
    """Fechas distintas presentes en las lecturas, en orden cronologico."""
    dates = {entry.date for entry in entries}
    ordered = sorted(dates, key=lambda d: (date_sort_key(d), d))
    if newest_first:
        valid = [d for d in ordered if parse_date(d) is not None]
        invalid = [d for d in ordered if parse_date(d) is None]
        return list(reversed(valid)) + invalid
    return ordered


def weekday_name(text: str, language: Language = Language.DE) -> str:
    """Localized weekday name; "" for invalid dates."""
    parsed = parse_date(text)
    if parsed is None:
        return ""
    return weekday_label(parsed.weekday(), language)
