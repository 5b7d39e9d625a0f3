"""Plain record types handed between the stores, handlers and templates.

Records are frozen dataclasses, so every value a store returns is an
independent snapshot; edits go through :func:`dataclasses.replace`, which
re-runs validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
import re
from typing import Any, ClassVar

from .errors import ValidationError

ANNOUNCEMENT_TYPES = ("sticker", "banner", "announcement")
ANNOUNCEMENT_TITLE_MAX = 100
ANNOUNCEMENT_CONTENT_MAX = 500
PRIORITY_MIN = 1
PRIORITY_MAX = 5
DEFAULT_PRIORITY = 3
DEFAULT_BACKGROUND_COLOR = "#000000dc"
DEFAULT_TEXT_COLOR = "#ffffff"
HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})")
DEFAULT_EVENT_CATEGORY = "general"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _require(record: Any, names: tuple[str, ...]) -> None:
    missing = [name for name in names if _is_blank(getattr(record, name))]
    if missing:
        raise ValidationError(
            "Please fill in all required fields: " + ", ".join(missing)
        )


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Attachment:
    """Binary file content with the metadata needed to serve it."""

    data: bytes = field(repr=False)
    content_type: str
    filename: str
    size: int

    def __post_init__(self) -> None:
        if not self.content_type or not self.filename:
            raise ValidationError("Attachments need a content type and filename")
        if self.size != len(self.data):
            raise ValidationError("Attachment size does not match its content")

    @classmethod
    def from_bytes(cls, data: bytes, *, content_type: str, filename: str) -> Attachment:
        return cls(data=data, content_type=content_type, filename=filename, size=len(data))

    def metadata(self) -> dict[str, Any]:
        return {
            "content_type": self.content_type,
            "filename": self.filename,
            "size": self.size,
        }


@dataclass(frozen=True)
class MessageRecord:
    """A sermon with an optional PDF."""

    kind: ClassVar[str] = "Message"
    required_fields: ClassVar[tuple[str, ...]] = (
        "title",
        "code",
        "date",
        "author",
        "description",
    )
    attachment_field: ClassVar[str] = "pdf_file"
    legacy_path_field: ClassVar[str | None] = "file_path"

    title: str
    code: str
    date: datetime
    author: str
    description: str
    pdf_file: Attachment | None = None
    file_path: str = ""
    featured: bool = False
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        _require(self, self.required_fields)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "code": self.code,
            "date": _iso(self.date),
            "author": self.author,
            "description": self.description,
            "file_path": self.file_path,
            "pdf_file": self.pdf_file.metadata() if self.pdf_file else None,
            "featured": self.featured,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class EventRecord:
    """A dated church event; ``status`` is derived at read time, never stored."""

    kind: ClassVar[str] = "Event"
    required_fields: ClassVar[tuple[str, ...]] = ("title", "date", "venue", "description")
    attachment_field: ClassVar[str] = "image_file"
    legacy_path_field: ClassVar[str | None] = "image_path"

    title: str
    date: datetime
    venue: str
    description: str
    end_date: datetime | None = None
    image_file: Attachment | None = None
    image_path: str = ""
    link: str = ""
    featured: bool = False
    active: bool = True
    category: str = DEFAULT_EVENT_CATEGORY
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        _require(self, self.required_fields)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": _iso(self.date),
            "end_date": _iso(self.end_date),
            "venue": self.venue,
            "description": self.description,
            "image_path": self.image_path,
            "image_file": self.image_file.metadata() if self.image_file else None,
            "link": self.link,
            "featured": self.featured,
            "active": self.active,
            "category": self.category,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class AnnouncementRecord:
    """A styled notice shown on the homepage until it expires."""

    kind: ClassVar[str] = "Announcement"
    required_fields: ClassVar[tuple[str, ...]] = ("title", "content")
    attachment_field: ClassVar[str] = "image_file"
    legacy_path_field: ClassVar[str | None] = None

    title: str
    content: str
    priority: int = DEFAULT_PRIORITY
    type: str = "announcement"
    background_color: str = DEFAULT_BACKGROUND_COLOR
    text_color: str = DEFAULT_TEXT_COLOR
    image_file: Attachment | None = None
    featured: bool = False
    active: bool = True
    expires_at: datetime | None = None
    display_order: int = 0
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        _require(self, self.required_fields)
        if len(self.title) > ANNOUNCEMENT_TITLE_MAX:
            raise ValidationError(
                f"Title must be at most {ANNOUNCEMENT_TITLE_MAX} characters"
            )
        if len(self.content) > ANNOUNCEMENT_CONTENT_MAX:
            raise ValidationError(
                f"Content must be at most {ANNOUNCEMENT_CONTENT_MAX} characters"
            )
        if not PRIORITY_MIN <= self.priority <= PRIORITY_MAX:
            raise ValidationError(
                f"Priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}"
            )
        if self.type not in ANNOUNCEMENT_TYPES:
            raise ValidationError(
                "Type must be one of: " + ", ".join(ANNOUNCEMENT_TYPES)
            )
        for color in (self.background_color, self.text_color):
            if not HEX_COLOR.fullmatch(color or ""):
                raise ValidationError("Colors must be hex values like #ffffff")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "priority": self.priority,
            "type": self.type,
            "background_color": self.background_color,
            "text_color": self.text_color,
            "image_file": self.image_file.metadata() if self.image_file else None,
            "featured": self.featured,
            "active": self.active,
            "expires_at": _iso(self.expires_at),
            "display_order": self.display_order,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


Record = MessageRecord | EventRecord | AnnouncementRecord


def field_names(record_type: type) -> set[str]:
    return {item.name for item in fields(record_type)}


def merge_patch(record: Record, patch: dict[str, Any]) -> Record:
    """Return ``record`` with ``patch`` applied, ignoring unknown keys and the id."""

    allowed = field_names(type(record)) - {"id", "created_at"}
    changes = {key: value for key, value in patch.items() if key in allowed}
    return replace(record, **changes)


def get_attachment(record: Record) -> Attachment | None:
    return getattr(record, record.attachment_field)


def get_legacy_path(record: Record) -> str:
    if record.legacy_path_field is None:
        return ""
    return getattr(record, record.legacy_path_field) or ""
