"""Database helpers for the durable backend."""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from .config import settings
from .results import Availability

logger = logging.getLogger(__name__)

# Probe results are reused for this long so one request probes at most once.
PROBE_CACHE_SECONDS = 2.0


def _connect_args(url: str, timeout: float) -> dict:
    """Driver arguments bounding both connecting and each statement by ``timeout``."""
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout}
    seconds = max(int(timeout), 1)
    if url.startswith("postgresql"):
        milliseconds = max(int(timeout * 1000), 1)
        return {
            "connect_timeout": seconds,
            "options": f"-c statement_timeout={milliseconds}",
        }
    if url.startswith("mysql"):
        return {
            "connect_timeout": seconds,
            "read_timeout": seconds,
            "write_timeout": seconds,
        }
    return {}


def make_engine(url: str, *, timeout: float | None = None) -> Engine:
    timeout = settings.backend_timeout_seconds if timeout is None else timeout
    options: dict = {"pool_pre_ping": True, "future": True}
    if not url.startswith("sqlite"):
        options["pool_timeout"] = timeout
    return create_engine(url, connect_args=_connect_args(url, timeout), **options)


def make_session_factory(engine: Engine) -> scoped_session:
    return scoped_session(
        sessionmaker(
            bind=engine,
            autoflush=False,
            autocommit=False,
            future=True,
            expire_on_commit=False,
        )
    )


class DurableBackend:
    """The primary document store: an engine plus a session factory."""

    def __init__(
        self,
        engine: Engine,
        session_factory: scoped_session | None = None,
        *,
        probe_cache_seconds: float = PROBE_CACHE_SECONDS,
    ):
        self.engine = engine
        self.session_factory = session_factory or make_session_factory(engine)
        self.probe_cache_seconds = probe_cache_seconds
        self._probe_lock = threading.Lock()
        self._last_status: Availability | None = None
        self._checked_at = 0.0

    @classmethod
    def from_url(cls, url: str, *, timeout: float | None = None) -> DurableBackend:
        return cls(make_engine(url, timeout=timeout))

    def probe(self) -> Availability:
        """Check reachability with a trivial query; never writes.

        A result younger than ``probe_cache_seconds`` is returned without
        touching the database. Failures are logged at WARNING only when the
        status changes.
        """
        with self._probe_lock:
            now = time.monotonic()
            if (
                self._last_status is not None
                and now - self._checked_at < self.probe_cache_seconds
            ):
                return self._last_status
            try:
                with self.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
            except SQLAlchemyError as exc:
                status = Availability.UNREACHABLE
                level = (
                    logging.DEBUG
                    if self._last_status is Availability.UNREACHABLE
                    else logging.WARNING
                )
                logger.log(level, "Durable backend probe failed: %s", exc)
            else:
                status = Availability.AVAILABLE
                if self._last_status is Availability.UNREACHABLE:
                    logger.info("Durable backend reachable again")
            self._last_status = status
            self._checked_at = now
            return status

    def invalidate(self) -> None:
        """Forget the cached probe result so the next call checks again."""
        with self._probe_lock:
            self._last_status = None

    @contextmanager
    def session(self):
        """Context manager returning a SQLAlchemy session."""
        session: Session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.session_factory.remove()
        self.engine.dispose()


def build_backend() -> DurableBackend | None:
    if not settings.durable_backend_enabled:
        logger.warning("No database_url configured; using temporary storage only")
        return None
    return DurableBackend.from_url(settings.database_url)


backend = build_backend()

