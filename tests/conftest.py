"""Shared fixtures: both ledger backends, a controllable clock, an API client."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from main import create_app
from sms_ledger.core.config import Settings
from sms_ledger.core.database import build_engine
from sms_ledger.services import IngestionService, StatisticsService, VerificationService
from sms_ledger.store import MemoryLedgerStore, SqlLedgerStore


class FakeClock:
    """Callable clock; tests move it forward explicitly."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# 12:00 in Dhaka
NOON_DHAKA = datetime(2026, 10, 18, 6, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOON_DHAKA)


@pytest.fixture
def make_store(tmp_path: Path):
    """Factory building a fresh store of the given backend; closed on teardown."""
    built = []

    def _make(kind: str, backup_retention: int = 100):
        if kind == "memory":
            store = MemoryLedgerStore(backup_retention=backup_retention)
        else:
            db_file = tmp_path / f"ledger-{len(built)}.db"
            store = SqlLedgerStore(
                build_engine(f"sqlite:///{db_file}"), backup_retention=backup_retention
            )
        built.append(store)
        return store

    yield _make

    for store in built:
        store.close()


@pytest.fixture(params=["memory", "sql"])
def store(request, make_store):
    return make_store(request.param)


@pytest.fixture
def ingestion(store, clock) -> IngestionService:
    return IngestionService(store, clock=clock)


@pytest.fixture
def verification(store, clock) -> VerificationService:
    return VerificationService(store, clock=clock)


@pytest.fixture
def statistics(store, clock) -> StatisticsService:
    return StatisticsService(store, timezone="Asia/Dhaka", recent_limit=50, clock=clock)


@pytest.fixture
def api_settings(tmp_path: Path) -> Settings:
    return Settings(
        LEDGER_BACKEND="sql",
        DATABASE_URL=f"sqlite:///{tmp_path / 'api.db'}",
        ADMIN_RESET_KEY="test-admin-key",
    )


@pytest.fixture
def client(api_settings):
    store = SqlLedgerStore(build_engine(api_settings.database_url), backup_retention=100)
    app = create_app(settings=api_settings, store=store)
    with TestClient(app) as c:
        yield c
    store.close()
