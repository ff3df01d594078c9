import threading
from collections import deque
from datetime import datetime
from typing import Dict, List, Optional

from sms_ledger.models import BackupSms, Transaction

from .base import InsertOutcome, LedgerStore, MatchCriteria, newest_first_key


def _detached_copy(obj):
    # Callers get copies; the only way to mutate a stored record is through the store
    cls = type(obj)
    return cls(**{c.name: getattr(obj, c.name) for c in cls.__table__.columns})


class MemoryLedgerStore(LedgerStore):
    """
    Process-local ledger for development and tests.
    A single lock is the serialization point for every read-modify-write.
    """

    name = "memory"

    def __init__(self, backup_retention: int = 0):
        self.backup_retention = backup_retention
        self._lock = threading.Lock()
        self._transactions: Dict[int, Transaction] = {}
        self._by_reference: Dict[str, int] = {}
        self._backups = deque(maxlen=backup_retention or None)
        self._next_id = 1
        self._next_backup_id = 1

    def find_by_transaction_id(self, transaction_id: str) -> Optional[Transaction]:
        if not transaction_id:
            return None
        with self._lock:
            record_id = self._by_reference.get(transaction_id)
            if record_id is None:
                return None
            return _detached_copy(self._transactions[record_id])

    def insert_if_absent(self, tx: Transaction) -> InsertOutcome:
        with self._lock:
            if tx.transaction_id and tx.transaction_id in self._by_reference:
                existing = self._transactions[self._by_reference[tx.transaction_id]]
                return InsertOutcome(inserted=False, existing=_detached_copy(existing))

            tx.id = self._next_id
            self._next_id += 1
            self._transactions[tx.id] = _detached_copy(tx)
            if tx.transaction_id:
                self._by_reference[tx.transaction_id] = tx.id
            return InsertOutcome(inserted=True)

    def try_complete_one(
        self, criteria: MatchCriteria, verified_by: str, now: datetime
    ) -> Optional[Transaction]:
        with self._lock:
            candidates = [tx for tx in self._transactions.values() if criteria.matches(tx)]
            if not candidates:
                return None
            chosen = max(candidates, key=newest_first_key)
            chosen.complete(verified_by, now)
            return _detached_copy(chosen)

    def list_all(self) -> List[Transaction]:
        with self._lock:
            records = sorted(
                self._transactions.values(), key=lambda tx: (tx.created_at, tx.id)
            )
            return [_detached_copy(tx) for tx in records]

    def append_backup(self, record: BackupSms) -> BackupSms:
        with self._lock:
            record.id = self._next_backup_id
            self._next_backup_id += 1
            # deque(maxlen=...) drops the oldest entry once retention is reached
            self._backups.appendleft(_detached_copy(record))
            return record

    def list_backups(self) -> List[BackupSms]:
        with self._lock:
            return [_detached_copy(b) for b in self._backups]

    def clear_all(self) -> None:
        with self._lock:
            self._transactions.clear()
            self._by_reference.clear()
            self._backups.clear()
