"""Shared pytest fixtures for the church website."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep the module-level app wiring away from any real database or config file.
_scratch = Path(tempfile.mkdtemp(prefix="churchsite-tests-"))
os.environ["CHURCHSITE_BASE_DIR"] = str(_scratch)
os.environ["CHURCHSITE_CONFIG"] = str(_scratch / "churchsite.toml")
os.environ["CHURCHSITE_DATABASE_URL"] = ""

from churchsite import api  # noqa: E402
from churchsite.database import DurableBackend  # noqa: E402
from churchsite.models import Base  # noqa: E402
from churchsite.store import build_stores  # noqa: E402


@pytest.fixture()
def backend():
    """A reachable durable backend on a fresh in-memory SQLite database."""

    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    durable = DurableBackend(engine)
    yield durable
    durable.dispose()


@pytest.fixture()
def unreachable_backend(tmp_path):
    """A configured backend whose database file can never be opened."""

    durable = DurableBackend.from_url(
        f"sqlite:///{tmp_path / 'missing' / 'site.db'}", timeout=0.1
    )
    yield durable
    durable.dispose()


@pytest.fixture()
def public_dir(tmp_path):
    path = tmp_path / "public"
    path.mkdir()
    return path


@pytest.fixture()
def stores(backend, public_dir):
    return build_stores(backend, public_dir=public_dir)


@pytest.fixture()
def fallback_stores(unreachable_backend, public_dir):
    return build_stores(unreachable_backend, public_dir=public_dir)


@pytest.fixture()
def client(stores):
    """Test client wired to the durable in-memory stores."""

    api.app.dependency_overrides[api.get_stores] = lambda: stores
    with TestClient(api.app) as test_client:
        yield test_client
    api.app.dependency_overrides.clear()


@pytest.fixture()
def admin_client(client):
    response = client.post(
        "/admin-login",
        data={"userId": "Admin", "password": "admin123"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client
