"""Request-parsing helpers shared by blueprints."""

from datetime import date, datetime


def parse_date_input(value):
    """Parse a date string, raising ValueError on bad input.

    Returns None for empty input so optional query params stay optional.
    Supports: YYYY-MM-DD, YYYY-MM-DDTHH:MM:SS (→ .date()), DD.MM.YYYY,
    date objects.
    """
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        pass
    try:
        return datetime.strptime(value, "%d.%m.%Y").date()
    except ValueError as exc:
        raise ValueError(
            "Invalid date format. Use YYYY-MM-DD or DD.MM.YYYY."
        ) from exc


def parse_bool(value) -> bool:
    """Interpret common truthy query-string spellings."""
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}
