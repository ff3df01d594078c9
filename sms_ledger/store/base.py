"""
Ledger store contract.

The engine talks to storage only through ``LedgerStore``. Every backend must
make ``insert_if_absent`` and ``try_complete_one`` atomic: two concurrent
callers can never both insert the same ``transaction_id`` and can never both
complete the same record.
"""
import abc
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sms_ledger.models import BackupSms, Transaction


@dataclass(frozen=True)
class MatchCriteria:
    service_type: str
    amount: Decimal
    # None -> any reference
    transaction_id: Optional[str] = None

    def matches(self, tx: Transaction) -> bool:
        if not tx.is_pending:
            return False
        if (tx.service_type or "").lower() != self.service_type.lower():
            return False
        if self.transaction_id is not None and tx.transaction_id != self.transaction_id:
            return False
        return tx.amount_canonical == self.amount


@dataclass(frozen=True)
class InsertOutcome:
    inserted: bool
    existing: Optional[Transaction] = None


def newest_first_key(tx: Transaction):
    # Same created_at -> the later insert wins
    return (tx.created_at, tx.id or 0)


class LedgerStore(abc.ABC):
    name = "abstract"

    @abc.abstractmethod
    def find_by_transaction_id(self, transaction_id: str) -> Optional[Transaction]:
        ...

    @abc.abstractmethod
    def insert_if_absent(self, tx: Transaction) -> InsertOutcome:
        """Insert ``tx`` unless its non-empty ``transaction_id`` is already stored."""

    @abc.abstractmethod
    def try_complete_one(
        self, criteria: MatchCriteria, verified_by: str, now: datetime
    ) -> Optional[Transaction]:
        """
        Complete the newest PENDING record satisfying ``criteria``.
        Returns the updated record, or None when nothing could be claimed.
        """

    @abc.abstractmethod
    def list_all(self) -> List[Transaction]:
        """All transactions, oldest first."""

    @abc.abstractmethod
    def append_backup(self, record: BackupSms) -> BackupSms:
        ...

    @abc.abstractmethod
    def list_backups(self) -> List[BackupSms]:
        """Backups, newest first."""

    @abc.abstractmethod
    def clear_all(self) -> None:
        """Administrative wipe. Never called from the ingest/verify paths."""

    def close(self) -> None:
        pass
