# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import pytest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

from fakes import ALICE, BOB, FakeDocumentStore, make_payload

from dashh_core.config import AppSettings
from dashh_core.data.models import FileRecord
from dashh_core.data.remote_service import RemoteDataService
from dashh_core.offline import LocalDatabase, LocalDataService, LocalPersistenceStore, PersistenceFacade
from dashh_core.services.encoding import encode_data_uri


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def fixed_now():
    """A fixed, timezone-aware 'now' in the afternoon (UTC+2)"""
    return datetime(2024, 5, 10, 15, 30, tzinfo=timezone(timedelta(hours=2)))


@pytest.fixture
def sample_payload():
    """A small text upload"""
    return make_payload()


@pytest.fixture
def sample_records(fixed_now):
    """Files owned by user-0001 spanning several categories and days"""
    def record(file_id, name, size, mime, uploaded_at, tags=(), description=""):
        return FileRecord(
            id=file_id,
            owner_id="user-0001",
            name=name,
            size_bytes=size,
            mime_type=mime,
            content=encode_data_uri(b"x" * 4, mime),
            uploaded_at=uploaded_at,
            tags=list(tags),
            description=description,
        )

    return [
        record("f1", "Holiday.png", 2048, "image/png", fixed_now - timedelta(days=2),
               tags=["travel"]),
        record("f2", "report.pdf", 10_000, "application/pdf", fixed_now - timedelta(hours=1),
               description="Quarterly report"),
        record("f3", "song.mp3", 5_000, "audio/mpeg", fixed_now - timedelta(hours=3)),
        record("f4", "backup.zip", 50_000, "application/zip", fixed_now - timedelta(days=30),
               tags=["Archive", "work"]),
        record("f5", "selfie.jpg", 1024, "image/jpeg", fixed_now - timedelta(minutes=5)),
    ]


# =============================================================================
# STORAGE FIXTURES
# =============================================================================

@pytest.fixture
def local_db(tmp_path):
    """Empty SQLite key/value store in a temp directory"""
    db = LocalDatabase(tmp_path / "dashh.db", prefix="dashh_")
    yield db
    db.close()


@pytest.fixture
def local_store(local_db):
    return LocalPersistenceStore(local_db)


@pytest.fixture
def fake_store():
    """In-memory backend with two registered accounts"""
    store = FakeDocumentStore()
    store.auth.add_user(*ALICE)
    store.auth.add_user(*BOB)
    return store


@pytest.fixture
def remote_service(fake_store):
    return RemoteDataService(fake_store)


@pytest.fixture
def signed_in_remote(remote_service):
    """RemoteDataService with alice signed in"""
    result = remote_service.login(*ALICE)
    assert result.success
    return remote_service


def build_facade(db_path, store, fallback_threshold=1, local_quota_bytes=None):
    settings = AppSettings(
        local_db_path=db_path,
        fallback_threshold=fallback_threshold,
        local_quota_bytes=local_quota_bytes,
    )
    facade = PersistenceFacade.from_settings(settings, store=store)
    facade.initialize()
    return facade


@pytest.fixture
def facade(tmp_path, fake_store):
    """Facade over the fake backend and a temp local store"""
    facade = build_facade(tmp_path / "dashh.db", fake_store)
    yield facade
    facade.local.store.database.close()


@pytest.fixture
def signed_in_facade(facade):
    """Facade with alice signed in"""
    result = facade.login(*ALICE)
    assert result.success
    return facade


@pytest.fixture
def make_facade(tmp_path, fake_store):
    """Factory for facades with custom threshold/quota over the shared fake backend"""
    created = []

    def _make(fallback_threshold=1, local_quota_bytes=None):
        facade = build_facade(
            tmp_path / f"dashh_{len(created)}.db",
            fake_store,
            fallback_threshold=fallback_threshold,
            local_quota_bytes=local_quota_bytes,
        )
        created.append(facade)
        return facade

    yield _make
    for facade in created:
        facade.local.store.database.close()


@pytest.fixture
def local_service(local_store):
    return LocalDataService(local_store)


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_supabase():
    """Mock Supabase client whose query builder chains onto itself"""
    mock_client = MagicMock()
    query = MagicMock()
    for method in ("select", "eq", "order", "limit", "insert", "update", "delete"):
        getattr(query, method).return_value = query
    query.execute.return_value = SimpleNamespace(data=[])
    mock_client.table.return_value = query
    mock_client.query = query
    return mock_client
