"""Verification races: a PENDING record is completed at most once."""

import threading
from collections import Counter

from sms_ledger.schemas import VerificationOutcome
from sms_ledger.services import VerificationService


def _race(n, target):
    barrier = threading.Barrier(n)
    results = []
    lock = threading.Lock()

    def worker(i):
        barrier.wait()
        outcome = target(i)
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def test_concurrent_verify_with_id_completes_once(ingestion, store, clock):
    ingestion.ingest({"service_type": "bKash", "amount": "500", "transaction_id": "TX1"})
    service = VerificationService(store, clock=clock)

    results = _race(
        8, lambda i: service.verify_with_id("bkash", "500", "TX1", verified_by=f"verifier-{i}")
    )

    outcomes = Counter(r.outcome for r in results)
    assert outcomes[VerificationOutcome.COMPLETED] == 1
    assert set(outcomes) <= {
        VerificationOutcome.COMPLETED,
        VerificationOutcome.NO_MATCH,
        VerificationOutcome.ALREADY_COMPLETED,
    }

    tx = store.find_by_transaction_id("TX1")
    winner = next(r for r in results if r.outcome == VerificationOutcome.COMPLETED)
    assert tx.status == "COMPLETED"
    assert winner.transaction_id == "TX1"
    assert tx.verified_by.startswith("verifier-")


def test_concurrent_verify_without_id_spreads_over_pending_records(ingestion, store, clock):
    for ref in ("A", "B", "C"):
        clock.advance(seconds=1)
        ingestion.ingest({"service_type": "Nagad", "amount": "100", "transaction_id": ref})
    service = VerificationService(store, clock=clock)

    results = _race(8, lambda i: service.verify_without_id("nagad", "100"))

    completed = [r.transaction_id for r in results if r.outcome == VerificationOutcome.COMPLETED]
    assert sorted(completed) == ["A", "B", "C"]
    assert sum(1 for r in results if r.outcome == VerificationOutcome.NO_MATCH) == 5
    assert all(tx.status == "COMPLETED" for tx in store.list_all())
