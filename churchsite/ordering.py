"""Event status derivation and the sort/filter rules used by listings.

Everything here is a pure function of its arguments; callers pass ``now``
explicitly so results never depend on hidden clock reads.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, time
from typing import Literal

from .records import AnnouncementRecord, EventRecord, MessageRecord

EventStatus = Literal["upcoming", "ongoing", "completed"]
EVENT_STATUSES: tuple[EventStatus, ...] = ("upcoming", "ongoing", "completed")

MessageSort = Literal["featured", "newest"]
EventSort = Literal["newest", "soonest"]
AnnouncementSort = Literal["priority"]

END_OF_DAY = time(23, 59, 59, 999000)


def event_status(event: EventRecord, now: datetime) -> EventStatus:
    """Classify an event relative to ``now``.

    Multi-day events are ongoing between their start and end instants. Single
    day events stay ongoing until the last millisecond of their start day.
    An end date earlier than the start is accepted as-is and usually reads
    as completed.
    """
    start = event.date
    if event.end_date is not None:
        if now < start:
            return "upcoming"
        if start <= now <= event.end_date:
            return "ongoing"
        return "completed"

    end_of_day = datetime.combine(start.date(), END_OF_DAY, tzinfo=start.tzinfo)
    if now < start:
        return "upcoming"
    if now <= end_of_day:
        return "ongoing"
    return "completed"


def event_with_status(event: EventRecord, now: datetime) -> dict:
    payload = event.to_dict()
    payload["status"] = event_status(event, now)
    return payload


def _epoch(value: datetime | None) -> float:
    return value.timestamp() if value else float("-inf")


def sort_messages(
    messages: Iterable[MessageRecord], sort: MessageSort = "featured"
) -> list[MessageRecord]:
    """Featured messages first then newest date first, or newest date only."""
    if sort == "newest":
        return sorted(messages, key=lambda m: m.date, reverse=True)
    return sorted(messages, key=lambda m: (m.featured, m.date), reverse=True)


def homepage_messages(messages: Iterable[MessageRecord], limit: int = 3) -> list[MessageRecord]:
    return sort_messages(messages, "newest")[:limit]


def sort_events(events: Iterable[EventRecord], sort: EventSort = "newest") -> list[EventRecord]:
    return sorted(events, key=lambda e: e.date, reverse=(sort == "newest"))


def active_events(events: Iterable[EventRecord], limit: int | None = None) -> list[EventRecord]:
    ordered = sort_events((e for e in events if e.active), "soonest")
    return ordered[:limit] if limit is not None else ordered


def announcement_is_visible(announcement: AnnouncementRecord, now: datetime) -> bool:
    if not announcement.active:
        return False
    return announcement.expires_at is None or announcement.expires_at > now


def sort_announcements(
    announcements: Iterable[AnnouncementRecord],
) -> list[AnnouncementRecord]:
    """Featured first, then higher priority, then most recently created."""
    return sorted(
        announcements,
        key=lambda a: (a.featured, a.priority, _epoch(a.created_at)),
        reverse=True,
    )


def visible_announcements(
    announcements: Iterable[AnnouncementRecord], now: datetime, limit: int = 3
) -> list[AnnouncementRecord]:
    visible = (a for a in announcements if announcement_is_visible(a, now))
    return sort_announcements(visible)[:limit]


def normalize_search_query(raw: str | None) -> str | None:
    """Return the trimmed query, or ``None`` when there is nothing to search for."""
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None


def message_matches(message: MessageRecord, term: str) -> bool:
    needle = term.lower()
    return any(
        needle in (value or "").lower()
        for value in (message.title, message.description, message.author, message.code)
    )


def search_messages(messages: Sequence[MessageRecord], term: str) -> list[MessageRecord]:
    return sort_messages((m for m in messages if message_matches(m, term)), "newest")
