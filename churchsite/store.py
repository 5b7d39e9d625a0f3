"""Record stores for messages, events and announcements.

Each store reads and writes the durable backend when it answers its probe and
otherwise works on an in-process list owned by the store instance. Backend
calls return :class:`~churchsite.results.Ok` or :class:`~churchsite.results.Err`;
every public method takes the fallback branch on ``Err``. Validation and
not-found errors are raised on either path.
"""

from __future__ import annotations

import logging
import mimetypes
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Generic, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import DurableBackend
from .errors import DurableBackendError, NoAttachment, NotFound
from .models import Announcement, Event, Message
from .ordering import (
    AnnouncementSort,
    EventSort,
    MessageSort,
    active_events,
    search_messages,
    sort_announcements,
    sort_events,
    sort_messages,
    visible_announcements,
)
from .records import (
    AnnouncementRecord,
    Attachment,
    EventRecord,
    MessageRecord,
    field_names,
    get_attachment,
    get_legacy_path,
    merge_patch,
)
from .results import Availability, BackendResult, Err, Ok
from .utils import localnow

logger = logging.getLogger(__name__)

R = TypeVar("R", MessageRecord, EventRecord, AnnouncementRecord)
T = TypeVar("T")

_READ_ONLY_FIELDS = {"id", "created_at"}


def _row_attachment(row: Any) -> Attachment | None:
    if row.attachment_data is None:
        return None
    data = bytes(row.attachment_data)
    return Attachment.from_bytes(
        data,
        content_type=row.attachment_content_type or "application/octet-stream",
        filename=row.attachment_filename or "attachment",
    )


def _write_attachment(row: Any, attachment: Attachment | None) -> None:
    row.attachment_data = attachment.data if attachment else None
    row.attachment_content_type = attachment.content_type if attachment else None
    row.attachment_filename = attachment.filename if attachment else None
    row.attachment_size = attachment.size if attachment else None


class RecordStore(Generic[R]):
    """Create/read/update/delete for one record type with a fallback list."""

    record_type: type
    model: type

    def __init__(
        self,
        backend: DurableBackend | None = None,
        *,
        initial: Iterable[R] = (),
        public_dir: Path | None = None,
    ):
        self._backend = backend
        self._public_dir = public_dir
        self._fallback: list[R] = list(initial)
        self._last_fallback_id = 0
        # Guards the fallback list and collection-wide operations.
        self._lock = threading.RLock()
        self._id_locks: dict[str, threading.Lock] = {}
        self._id_locks_guard = threading.Lock()
        self._attachment_field = self.record_type.attachment_field
        self._column_fields = field_names(self.record_type) - {self._attachment_field}

    @property
    def kind(self) -> str:
        return self.record_type.kind

    # -- backend plumbing -------------------------------------------------

    def availability(self) -> Availability:
        """Probe the durable backend without side effects."""
        if self._backend is None:
            return Availability.DISABLED
        return self._backend.probe()

    def _durable(self, operation: str, work: Callable[[Session], T]) -> BackendResult[T]:
        status = self.availability()
        if not status.is_available:
            logger.debug("%s %s: durable backend %s", self.kind, operation, status.value)
            return Err(f"durable backend {status.value}")
        try:
            with self._backend.session() as session:
                return Ok(work(session))
        except SQLAlchemyError as exc:
            self._backend.invalidate()
            error = DurableBackendError(str(exc))
            logger.warning(
                "%s %s failed on the durable backend, using temporary storage: %s",
                self.kind,
                operation,
                error.message,
            )
            return Err(error.message)

    @contextmanager
    def _locked(self, record_id: str) -> Iterator[None]:
        with self._id_locks_guard:
            lock = self._id_locks.setdefault(record_id, threading.Lock())
        with lock:
            yield

    def _next_fallback_id(self) -> str:
        candidate = time.time_ns() // 1_000_000
        self._last_fallback_id = max(candidate, self._last_fallback_id + 1)
        return str(self._last_fallback_id)

    def _to_record(self, row: Any) -> R:
        values = {name: getattr(row, name) for name in self._column_fields}
        values[self._attachment_field] = _row_attachment(row)
        return self.record_type(**values)

    def _write_row(self, row: Any, before: R | None, after: R) -> None:
        """Copy fields of ``after`` that differ from ``before`` onto ``row``."""
        for name in self._column_fields - _READ_ONLY_FIELDS:
            value = getattr(after, name)
            if before is None or getattr(before, name) != value:
                setattr(row, name, value)
        attachment = get_attachment(after)
        if before is None or get_attachment(before) != attachment:
            _write_attachment(row, attachment)

    def _get_row(self, session: Session, record_id: str) -> Any:
        row = session.get(self.model, record_id)
        if row is None:
            raise NotFound(self.kind, record_id)
        return row

    def _fallback_index(self, record_id: str) -> int:
        for index, record in enumerate(self._fallback):
            if record.id == record_id:
                return index
        raise NotFound(self.kind, record_id)

    def _load_all(self) -> list[R]:
        def work(session: Session) -> list[R]:
            rows = session.scalars(select(self.model)).all()
            return [self._to_record(row) for row in rows]

        result = self._durable("find_all", work)
        if isinstance(result, Ok):
            return result.value
        with self._lock:
            return list(self._fallback)

    # -- public operations ------------------------------------------------

    def create(self, record: R) -> R:
        """Store a new record and return it with its assigned id."""
        now = localnow()
        # replace() re-runs validation on the incoming values.
        record = replace(record, id=None, created_at=now, updated_at=now)

        def work(session: Session) -> R:
            row = self.model(created_at=now)
            self._write_row(row, None, record)
            session.add(row)
            session.flush()
            return self._to_record(row)

        result = self._durable("create", work)
        if isinstance(result, Ok):
            logger.info("%s %s saved to the durable store", self.kind, result.value.id)
            return result.value

        with self._lock:
            stored = replace(record, id=self._next_fallback_id())
            self._fallback.insert(0, stored)
        logger.info("%s %s saved to temporary storage", self.kind, stored.id)
        return stored

    def find_by_id(self, record_id: str) -> R:
        result = self._durable(
            "find_by_id", lambda session: self._to_record(self._get_row(session, record_id))
        )
        if isinstance(result, Ok):
            return result.value
        with self._lock:
            return self._fallback[self._fallback_index(record_id)]

    def update(
        self,
        record_id: str,
        patch: dict[str, Any],
        *,
        new_attachment: Attachment | None = None,
        remove_attachment: bool = False,
    ) -> R:
        """Merge ``patch`` into the stored record.

        ``remove_attachment`` clears the attachment (and any legacy path);
        ``new_attachment`` replaces it; with neither, the stored attachment is
        kept as read back from the store.
        """
        changes = {
            key: value
            for key, value in patch.items()
            if key not in (self._attachment_field, self.record_type.legacy_path_field)
        }
        if remove_attachment:
            changes[self._attachment_field] = None
            if self.record_type.legacy_path_field:
                changes[self.record_type.legacy_path_field] = ""
        elif new_attachment is not None:
            changes[self._attachment_field] = new_attachment

        updated = self._modify(record_id, "update", lambda current: merge_patch(current, changes))
        logger.info("%s %s updated", self.kind, record_id)
        return updated

    def _modify(self, record_id: str, operation: str, transform: Callable[[R], R]) -> R:
        with self._locked(record_id):
            now = localnow()

            def work(session: Session) -> R:
                row = self._get_row(session, record_id)
                current = self._to_record(row)
                changed = replace(transform(current), updated_at=now)
                self._write_row(row, current, changed)
                session.flush()
                return self._to_record(row)

            result = self._durable(operation, work)
            if isinstance(result, Ok):
                return result.value

            with self._lock:
                index = self._fallback_index(record_id)
                changed = replace(transform(self._fallback[index]), updated_at=now)
                self._fallback[index] = changed
                return changed

    def delete(self, record_id: str) -> None:
        with self._locked(record_id):

            def work(session: Session) -> None:
                session.delete(self._get_row(session, record_id))

            result = self._durable("delete", work)
            if isinstance(result, Err):
                with self._lock:
                    del self._fallback[self._fallback_index(record_id)]
        with self._id_locks_guard:
            self._id_locks.pop(record_id, None)
        logger.info("%s %s deleted", self.kind, record_id)

    def get_attachment(self, record_id: str) -> Attachment:
        """Return the stored attachment, falling back to a legacy file path."""
        record = self.find_by_id(record_id)
        attachment = get_attachment(record)
        if attachment is not None:
            return attachment
        legacy = self._read_legacy_file(get_legacy_path(record))
        if legacy is not None:
            return legacy
        raise NoAttachment(f"No attachment available for this {self.kind.lower()}")

    def _resolve_legacy_path(self, relative: str) -> Path | None:
        if not relative or self._public_dir is None:
            return None
        root = self._public_dir.resolve()
        candidate = (root / relative.lstrip("/")).resolve()
        if not candidate.is_relative_to(root) or not candidate.is_file():
            return None
        return candidate

    def _read_legacy_file(self, relative: str) -> Attachment | None:
        path = self._resolve_legacy_path(relative)
        if path is None:
            return None
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return Attachment.from_bytes(
            path.read_bytes(), content_type=content_type, filename=path.name
        )

    def unfeature(self, record_id: str) -> R:
        return self._modify(record_id, "unfeature", lambda r: replace(r, featured=False))


class MessageStore(RecordStore[MessageRecord]):
    record_type = MessageRecord
    model = Message

    def find_all(self, sort: MessageSort = "featured") -> list[MessageRecord]:
        records = self._load_all()
        return sort_messages(records, sort)

    def search(self, term: str) -> list[MessageRecord]:
        """Case-insensitive match on title, description, author or code."""
        records = self._load_all()
        return search_messages(records, term)

    def set_featured(self, record_id: str) -> MessageRecord:
        """Make ``record_id`` the only featured message."""
        with self._locked(record_id), self._lock:
            now = localnow()

            def work(session: Session) -> MessageRecord:
                row = self._get_row(session, record_id)
                session.execute(
                    update(Message)
                    .where(Message.featured.is_(True), Message.id != record_id)
                    .values(featured=False, updated_at=now)
                )
                row.featured = True
                row.updated_at = now
                session.flush()
                return self._to_record(row)

            result = self._durable("set_featured", work)
            if isinstance(result, Ok):
                featured = result.value
            else:
                target = self._fallback_index(record_id)
                self._fallback = [
                    replace(record, featured=(index == target), updated_at=now)
                    if record.featured or index == target
                    else record
                    for index, record in enumerate(self._fallback)
                ]
                featured = self._fallback[target]
        logger.info("Message %s set as featured", record_id)
        return featured

    def migrate_legacy_attachments(self) -> BackendResult[int]:
        """Copy legacy file-path PDFs into the durable store as binary attachments."""

        def work(session: Session) -> int:
            migrated = 0
            rows = session.scalars(
                select(Message).where(
                    Message.file_path != "", Message.attachment_data.is_(None)
                )
            ).all()
            for row in rows:
                path = self._resolve_legacy_path(row.file_path)
                if path is None:
                    continue
                data = path.read_bytes()
                _write_attachment(
                    row,
                    Attachment.from_bytes(
                        data, content_type="application/pdf", filename=path.name
                    ),
                )
                migrated += 1
            return migrated

        result = self._durable("migrate_legacy_attachments", work)
        if isinstance(result, Ok):
            logger.info("Migrated %s legacy PDFs into the durable store", result.value)
        return result


class EventStore(RecordStore[EventRecord]):
    record_type = EventRecord
    model = Event

    def find_all(self, sort: EventSort = "newest") -> list[EventRecord]:
        records = self._load_all()
        return sort_events(records, sort)

    def find_active(self, limit: int | None = None) -> list[EventRecord]:
        records = self._load_all()
        return active_events(records, limit)


class AnnouncementStore(RecordStore[AnnouncementRecord]):
    record_type = AnnouncementRecord
    model = Announcement

    def find_all(self, sort: AnnouncementSort = "priority") -> list[AnnouncementRecord]:
        records = self._load_all()
        return sort_announcements(records)

    def find_visible(self, now: datetime, limit: int = 3) -> list[AnnouncementRecord]:
        records = self._load_all()
        return visible_announcements(records, now, limit)

    def toggle_active(self, record_id: str) -> AnnouncementRecord:
        return self._modify(
            record_id, "toggle_active", lambda r: replace(r, active=not r.active)
        )


@dataclass
class Stores:
    messages: MessageStore
    events: EventStore
    announcements: AnnouncementStore

    def availability(self) -> Availability:
        return self.messages.availability()


def build_stores(
    backend: DurableBackend | None,
    *,
    public_dir: Path | None = None,
    initial_messages: Iterable[MessageRecord] = (),
) -> Stores:
    return Stores(
        messages=MessageStore(backend, initial=initial_messages, public_dir=public_dir),
        events=EventStore(backend, public_dir=public_dir),
        announcements=AnnouncementStore(backend, public_dir=public_dir),
    )
