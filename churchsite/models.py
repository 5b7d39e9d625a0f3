"""SQLAlchemy models backing the durable store."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    LargeBinary,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

from .utils import localnow

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return localnow()


class AttachmentColumns:
    """Binary payload plus the metadata needed to serve it back."""

    attachment_data = Column(LargeBinary, nullable=True)
    attachment_content_type = Column(String(128), nullable=True)
    attachment_filename = Column(String(255), nullable=True)
    attachment_size = Column(Integer, nullable=True)


class Message(AttachmentColumns, Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    code = Column(String(64), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    author = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    file_path = Column(String(512), nullable=False, default="")
    featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


class Event(AttachmentColumns, Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=True)
    venue = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image_path = Column(String(512), nullable=False, default="")
    link = Column(String(512), nullable=False, default="")
    featured = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)
    category = Column(String(64), nullable=False, default="general")
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


class Announcement(AttachmentColumns, Base):
    __tablename__ = "announcements"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(100), nullable=False)
    content = Column(String(500), nullable=False)
    priority = Column(Integer, nullable=False, default=3)
    type = Column(String(16), nullable=False, default="announcement")
    background_color = Column(String(32), nullable=False, default="#000000dc")
    text_color = Column(String(32), nullable=False, default="#ffffff")
    featured = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_now, nullable=False, index=True)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)
