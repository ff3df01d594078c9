import enum
from decimal import Decimal

from sqlalchemy import Column, Index, Integer, String, Text, text

from sms_ledger.amounts import normalize_amount
from sms_ledger.core.database import Base, UtcDateTime, utcnow


class TransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


# The only legal move. COMPLETED is terminal.
ALLOWED_TRANSITIONS = {
    (TransactionStatus.PENDING.value, TransactionStatus.COMPLETED.value),
}


def can_transition(current: str, target: str) -> bool:
    return (current, target) in ALLOWED_TRANSITIONS


class Transaction(Base):
    __tablename__ = "transactions"

    # --- IDENTIFIERS ---
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # External reference printed in the SMS ("TrxID ..."). May be empty.
    # Non-empty values are the dedup key (partial unique index below).
    transaction_id = Column(String(255), nullable=False, default="")

    # --- DESCRIPTIVE (stored verbatim, never interpreted) ---
    sender = Column(String(255), nullable=False, default="")
    account_number = Column(String(255), nullable=False, default="")
    reference = Column(String(255), nullable=False, default="")
    sim_info = Column(String(255), nullable=False, default="")
    original_message = Column(Text, nullable=False, default="")

    # Provider label (bKash, Nagad, ...). Compared case-insensitively.
    service_type = Column(String(255), nullable=False, default="Other")
    transaction_type = Column(String(255), nullable=False, default="Unknown")

    # Raw amount text as submitted; see amount_canonical
    amount = Column(String(255), nullable=False, default="")

    # --- SUBMITTER ---
    ip_address = Column(String(64), nullable=True)
    device_info = Column(String(255), nullable=True)

    # --- LIFECYCLE ---
    status = Column(String(16), nullable=False, default=TransactionStatus.PENDING.value)
    created_at = Column(UtcDateTime, nullable=False, default=utcnow)
    verified_at = Column(UtcDateTime, nullable=True)
    verified_by = Column(String(255), nullable=True)

    __table_args__ = (
        Index(
            "uq_transactions_transaction_id",
            "transaction_id",
            unique=True,
            sqlite_where=text("transaction_id != ''"),
            postgresql_where=text("transaction_id != ''"),
        ),
        Index("ix_transactions_service_type", "service_type"),
        Index("ix_transactions_status", "status"),
        Index("ix_transactions_created_at", "created_at"),
    )

    @property
    def amount_canonical(self) -> Decimal:
        return normalize_amount(self.amount)

    @property
    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING.value

    @property
    def is_completed(self) -> bool:
        return self.status == TransactionStatus.COMPLETED.value

    def complete(self, verified_by: str, now) -> None:
        """
        PENDING -> COMPLETED on an in-process object.
        Stores call this only while holding their own serialization point.
        """
        if not can_transition(self.status, TransactionStatus.COMPLETED.value):
            raise ValueError(f"illegal transition {self.status} -> COMPLETED")
        self.status = TransactionStatus.COMPLETED.value
        self.verified_at = now
        self.verified_by = verified_by

    def __repr__(self) -> str:
        return (
            f"<Transaction id={self.id} transaction_id={self.transaction_id!r} "
            f"service_type={self.service_type!r} amount={self.amount!r} status={self.status}>"
        )
