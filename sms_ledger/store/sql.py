from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sms_ledger.core.database import build_session_factory, init_db
from sms_ledger.core.errors import StoreUnavailable
from sms_ledger.core.logger import get_logger
from sms_ledger.models import BackupSms, Transaction, TransactionStatus

from .base import InsertOutcome, LedgerStore, MatchCriteria

logger = get_logger("sms_ledger.store.sql")

PENDING = TransactionStatus.PENDING.value
COMPLETED = TransactionStatus.COMPLETED.value


class SqlLedgerStore(LedgerStore):
    """SQLAlchemy-backed ledger. One short session per operation."""

    name = "sql"

    def __init__(self, engine: Engine, backup_retention: int = 0):
        self.engine = engine
        self.backup_retention = backup_retention
        self._session_factory = build_session_factory(engine)
        init_db(engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("store.unavailable", extra={"fields": {"error": str(e)}})
            raise StoreUnavailable(f"ledger store failure: {e.__class__.__name__}") from e
        finally:
            db.close()

    # --- READS ---

    def find_by_transaction_id(self, transaction_id: str) -> Optional[Transaction]:
        if not transaction_id:
            return None
        with self._session() as db:
            return (
                db.query(Transaction)
                .filter(Transaction.transaction_id == transaction_id)
                .first()
            )

    def list_all(self) -> List[Transaction]:
        with self._session() as db:
            return (
                db.query(Transaction)
                .order_by(Transaction.created_at.asc(), Transaction.id.asc())
                .all()
            )

    def list_backups(self) -> List[BackupSms]:
        with self._session() as db:
            return db.query(BackupSms).order_by(BackupSms.id.desc()).all()

    # --- WRITES ---

    def insert_if_absent(self, tx: Transaction) -> InsertOutcome:
        with self._session() as db:
            if tx.transaction_id:
                existing = (
                    db.query(Transaction)
                    .filter(Transaction.transaction_id == tx.transaction_id)
                    .first()
                )
                if existing:
                    return InsertOutcome(inserted=False, existing=existing)

            db.add(tx)
            try:
                db.commit()
            except IntegrityError:
                # A concurrent ingest of the same reference won the unique index
                db.rollback()
                existing = (
                    db.query(Transaction)
                    .filter(Transaction.transaction_id == tx.transaction_id)
                    .first()
                )
                if existing is None:
                    raise
                return InsertOutcome(inserted=False, existing=existing)

            return InsertOutcome(inserted=True)

    def try_complete_one(
        self, criteria: MatchCriteria, verified_by: str, now: datetime
    ) -> Optional[Transaction]:
        with self._session() as db:
            query = db.query(Transaction).filter(
                Transaction.status == PENDING,
                func.lower(Transaction.service_type) == criteria.service_type.lower(),
            )
            if criteria.transaction_id is not None:
                query = query.filter(Transaction.transaction_id == criteria.transaction_id)

            # Amounts are free text; the canonical comparison happens in Python
            candidates = [
                tx
                for tx in query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
                if criteria.matches(tx)
            ]

            for candidate in candidates:
                # Compare-and-set on status: only one caller can flip a PENDING row
                claimed = (
                    db.query(Transaction)
                    .filter(Transaction.id == candidate.id, Transaction.status == PENDING)
                    .update(
                        {
                            Transaction.status: COMPLETED,
                            Transaction.verified_at: now,
                            Transaction.verified_by: verified_by,
                        },
                        synchronize_session=False,
                    )
                )
                db.commit()
                if claimed == 1:
                    db.refresh(candidate)
                    return candidate

                logger.info(
                    "store.claim_lost",
                    extra={"fields": {"record_id": candidate.id}},
                )

            return None

    def append_backup(self, record: BackupSms) -> BackupSms:
        with self._session() as db:
            db.add(record)
            db.flush()

            if self.backup_retention > 0:
                cutoff = (
                    db.query(BackupSms.id)
                    .order_by(BackupSms.id.desc())
                    .offset(self.backup_retention)
                    .limit(1)
                    .scalar()
                )
                if cutoff is not None:
                    db.query(BackupSms).filter(BackupSms.id <= cutoff).delete(
                        synchronize_session=False
                    )

            db.commit()
            return record

    def clear_all(self) -> None:
        with self._session() as db:
            db.query(Transaction).delete(synchronize_session=False)
            db.query(BackupSms).delete(synchronize_session=False)
            db.commit()

    def close(self) -> None:
        self.engine.dispose()
