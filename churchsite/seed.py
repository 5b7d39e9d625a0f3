"""Sample content: the starter fallback sermons and a Faker demo seeder."""

from __future__ import annotations

import random
from datetime import datetime, timedelta

from faker import Faker

from .records import (
    ANNOUNCEMENT_TYPES,
    AnnouncementRecord,
    EventRecord,
    MessageRecord,
)
from .store import Stores
from .utils import localnow

SAMPLE_MESSAGES: tuple[MessageRecord, ...] = (
    MessageRecord(
        id="1",
        title="The Power of Faith",
        code="PF",
        date=datetime(2023, 10, 15),
        author="Pastor John",
        description=(
            "Exploring how faith can move mountains in our daily lives and "
            "strengthen our relationship with God."
        ),
        file_path="/pdf/1",
        featured=True,
    ),
    MessageRecord(
        id="2",
        title="Divine Mercy",
        code="MD",
        date=datetime(2023, 10, 8),
        author="Pastor Mark",
        description=(
            "Understanding God's infinite mercy and how it transforms our lives "
            "when we accept it."
        ),
        file_path="/pdf/2",
    ),
    MessageRecord(
        id="3",
        title="Joy in Giving",
        code="JPEG",
        date=datetime(2023, 10, 1),
        author="Pastor Sarah",
        description=(
            "Discovering the joy and blessings that come from a generous heart "
            "and giving spirit."
        ),
        file_path="/pdf/3",
    ),
    MessageRecord(
        id="4",
        title="Hope in Trials",
        code="HT",
        date=datetime(2023, 9, 24),
        author="Pastor James",
        description="Finding hope and strength in God during difficult times and trials.",
    ),
)

_sermon_themes = [
    "Grace",
    "Forgiveness",
    "Patience",
    "Gratitude",
    "Courage",
    "Renewal",
    "Service",
    "Stewardship",
]
_event_kinds = [
    "Prayer Vigil",
    "Youth Retreat",
    "Choir Concert",
    "Bible Study",
    "Community Lunch",
    "Revival Week",
]
_venues = ["Main Sanctuary", "Fellowship Hall", "Church Grounds", "Youth Center"]


def seed_demo_content(
    stores: Stores,
    *,
    messages: int = 6,
    events: int = 4,
    announcements: int = 3,
) -> dict[str, int]:
    """Create fake messages, events and announcements through the stores."""
    if min(messages, events, announcements) < 0:
        raise ValueError("Counts must be >= 0")

    fake = Faker()
    stats = {"messages": 0, "events": 0, "announcements": 0}

    for _ in range(messages):
        stores.messages.create(_fake_message(fake))
        stats["messages"] += 1
    for _ in range(events):
        stores.events.create(_fake_event(fake))
        stats["events"] += 1
    for _ in range(announcements):
        stores.announcements.create(_fake_announcement(fake))
        stats["announcements"] += 1
    return stats


def _fake_message(fake: Faker) -> MessageRecord:
    theme = random.choice(_sermon_themes)
    return MessageRecord(
        title=f"{theme} in {fake.word().capitalize()} Times",
        code="".join(word[0] for word in theme.split()).upper() + str(random.randint(1, 99)),
        date=localnow() - timedelta(days=7 * random.randint(0, 52)),
        author=f"Pastor {fake.first_name()}",
        description=fake.paragraph(nb_sentences=3),
    )


def _fake_event(fake: Faker) -> EventRecord:
    start = localnow().replace(hour=9, minute=0, second=0, microsecond=0)
    start += timedelta(days=random.randint(-10, 45))
    end = start + timedelta(days=random.randint(1, 3)) if random.random() < 0.3 else None
    return EventRecord(
        title=f"{fake.city()} {random.choice(_event_kinds)}",
        date=start,
        end_date=end,
        venue=random.choice(_venues),
        description=fake.paragraph(nb_sentences=4),
        link=fake.url() if random.random() < 0.5 else "",
    )


def _fake_announcement(fake: Faker) -> AnnouncementRecord:
    expires = localnow() + timedelta(days=random.randint(3, 30))
    return AnnouncementRecord(
        title=fake.sentence(nb_words=5)[:100],
        content=fake.paragraph(nb_sentences=2)[:500],
        priority=random.randint(1, 5),
        type=random.choice(ANNOUNCEMENT_TYPES),
        expires_at=expires if random.random() < 0.5 else None,
    )
