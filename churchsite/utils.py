"""Utility helpers for the church website."""

from __future__ import annotations

from datetime import datetime
import html
import re

from markupsafe import Markup

from .errors import ValidationError

MIN_HIGHLIGHT_TERM_LENGTH = 3


def localnow() -> datetime:
    """Return a naive datetime in the server's local time.

    Dates entered through the admin forms are wall-clock values without an
    offset, so comparisons are made in the same frame.
    """

    return datetime.now().replace(tzinfo=None)


def parse_form_datetime(raw: str | None, *, field: str) -> datetime | None:
    """Parse an ``<input type=date>`` or ``datetime-local`` value.

    Blank input yields ``None``; anything unparseable raises ``ValidationError``.
    Values carrying an offset are converted to naive local time.
    """

    cleaned = (raw or "").strip()
    if not cleaned:
        return None
    try:
        value = datetime.fromisoformat(cleaned)
    except ValueError as exc:
        raise ValidationError(f"Invalid {field}; use YYYY-MM-DD") from exc
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def form_datetime_value(value: datetime | None) -> str:
    """Render a datetime for a ``datetime-local`` input."""
    if not value:
        return ""
    return value.strftime("%Y-%m-%dT%H:%M")


def form_date_value(value: datetime | None) -> str:
    if not value:
        return ""
    return value.strftime("%Y-%m-%d")


def display_date(value: datetime | None) -> str:
    if not value:
        return ""
    return f"{value:%B} {value.day}, {value.year}"


def highlight_text(text: str | None, query: str | None) -> Markup:
    """Wrap each search term of three or more characters in a highlight span.

    The surrounding text is HTML-escaped so the result is safe for templates.
    """

    escaped = html.escape(text or "")
    if not query or not escaped:
        return Markup(escaped)

    terms = [
        html.escape(term)
        for term in query.split(" ")
        if len(term) >= MIN_HIGHLIGHT_TERM_LENGTH
    ]
    if not terms:
        return Markup(escaped)

    pattern = re.compile("|".join(re.escape(term) for term in terms), re.IGNORECASE)
    highlighted = pattern.sub(
        lambda match: f'<span class="search-highlight">{match.group(0)}</span>',
        escaped,
    )
    return Markup(highlighted)


def humanize_time(value: datetime | None, *, now: datetime | None = None) -> str:
    """Return a friendly string such as 'in 2 weeks' or '3 hours ago'."""
    if not value:
        return ""
    now = now or localnow()
    delta_seconds = (value - now).total_seconds()
    past = delta_seconds < 0
    seconds = abs(delta_seconds)

    units = [
        ("year", 365 * 24 * 3600),
        ("month", 30 * 24 * 3600),
        ("week", 7 * 24 * 3600),
        ("day", 24 * 3600),
        ("hour", 3600),
        ("minute", 60),
    ]

    amount = 0
    label = "minute"
    for name, step in units:
        value_count = int(seconds // step)
        if value_count >= 1:
            amount = value_count
            label = name
            break
    else:
        return "in moments" if not past else "moments ago"

    if amount != 1:
        label = f"{label}s"
    if past:
        return f"{amount} {label} ago"
    return f"in {amount} {label}"
