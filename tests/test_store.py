from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import text

from sms_ledger.core.config import Settings
from sms_ledger.core.errors import StoreUnavailable
from sms_ledger.models import Transaction
from sms_ledger.store import MatchCriteria, MemoryLedgerStore, SqlLedgerStore, build_store

NOW = datetime(2026, 10, 18, 6, 0, tzinfo=timezone.utc)


def _tx(ref, service_type="bKash", amount="500", status="PENDING"):
    return Transaction(
        transaction_id=ref,
        service_type=service_type,
        amount=amount,
        sender="",
        account_number="",
        reference="",
        sim_info="",
        original_message="",
        transaction_type="received",
        status=status,
        created_at=NOW,
    )


def test_insert_if_absent_reports_existing(store):
    assert store.insert_if_absent(_tx("TX1")).inserted is True

    outcome = store.insert_if_absent(_tx("TX1", amount="999"))

    assert outcome.inserted is False
    assert outcome.existing.amount == "500"


def test_try_complete_one_only_touches_pending(store):
    store.insert_if_absent(_tx("TX1"))
    criteria = MatchCriteria(service_type="BKASH", amount=Decimal("500"), transaction_id="TX1")

    first = store.try_complete_one(criteria, "API", NOW)
    second = store.try_complete_one(criteria, "API", NOW)

    assert first.status == "COMPLETED"
    assert first.verified_at == NOW
    assert second is None


def test_returned_records_are_not_live(store):
    store.insert_if_absent(_tx("TX1"))

    copy = store.find_by_transaction_id("TX1")
    copy.status = "COMPLETED"

    assert store.find_by_transaction_id("TX1").status == "PENDING"


def test_clear_all_is_explicit(store):
    store.insert_if_absent(_tx("TX1"))
    store.insert_if_absent(_tx("TX2"))

    assert len(store.list_all()) == 2
    store.clear_all()
    assert store.list_all() == []
    assert store.list_backups() == []


def test_sql_failure_surfaces_as_store_unavailable(make_store):
    store = make_store("sql")
    with store.engine.begin() as conn:
        conn.execute(text("DROP TABLE transactions"))

    with pytest.raises(StoreUnavailable):
        store.list_all()
    with pytest.raises(StoreUnavailable):
        store.try_complete_one(MatchCriteria("bKash", Decimal("1")), "API", NOW)


def test_build_store_selects_backend(tmp_path):
    memory = build_store(Settings(LEDGER_BACKEND="memory"))
    sql = build_store(
        Settings(LEDGER_BACKEND="sql", DATABASE_URL=f"sqlite:///{tmp_path / 'x.db'}")
    )
    try:
        assert isinstance(memory, MemoryLedgerStore)
        assert isinstance(sql, SqlLedgerStore)
    finally:
        sql.close()

    with pytest.raises(ValueError):
        build_store(Settings(LEDGER_BACKEND="mongo"))


def test_postgres_scheme_is_rewritten():
    settings = Settings(DATABASE_URL="postgres://u:p@db:5432/ledger")
    assert settings.database_url == "postgresql://u:p@db:5432/ledger"
