from datetime import datetime, timezone
from decimal import Decimal

import pytest

from sms_ledger.models import Transaction, TransactionStatus, can_transition

NOW = datetime(2026, 10, 18, 6, 0, tzinfo=timezone.utc)


def _tx(**kw) -> Transaction:
    fields = dict(
        transaction_id="TX1",
        service_type="bKash",
        amount="Tk 1,500.00",
        status=TransactionStatus.PENDING.value,
        created_at=NOW,
    )
    fields.update(kw)
    return Transaction(**fields)


def test_only_pending_to_completed_is_legal():
    assert can_transition("PENDING", "COMPLETED")
    assert not can_transition("COMPLETED", "PENDING")
    assert not can_transition("PENDING", "PENDING")
    assert not can_transition("COMPLETED", "COMPLETED")


def test_complete_sets_verification_fields():
    tx = _tx()
    tx.complete("10.0.0.7", NOW)

    assert tx.is_completed
    assert tx.verified_at == NOW
    assert tx.verified_by == "10.0.0.7"


def test_completed_record_cannot_transition_again():
    tx = _tx()
    tx.complete("API", NOW)

    with pytest.raises(ValueError):
        tx.complete("someone-else", NOW)
    assert tx.verified_by == "API"


def test_amount_canonical_is_derived_from_text():
    assert _tx().amount_canonical == Decimal("1500")
    assert _tx(amount="").amount_canonical == Decimal("0")
