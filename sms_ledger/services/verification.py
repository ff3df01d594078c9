"""
Payment verification.

A verifier (checkout page, shop owner, ...) asks "did this payment arrive?".
A match consumes exactly one PENDING record: the store flips it to COMPLETED
with a conditional write, so concurrent requests can never both claim it.
"""
from typing import Callable, Optional

from sms_ledger.amounts import ZERO, normalize_amount
from sms_ledger.core.database import utcnow
from sms_ledger.core.errors import InvalidPayload, TransactionNotFound
from sms_ledger.core.logger import get_logger
from sms_ledger.models import TransactionStatus
from sms_ledger.schemas import StatusResult, VerificationOutcome, VerificationResult
from sms_ledger.store import LedgerStore, MatchCriteria

logger = get_logger("sms_ledger.verify")

DEFAULT_VERIFIER = "API"


class VerificationService:
    def __init__(
        self,
        store: LedgerStore,
        clock: Callable = utcnow,
        allow_zero_amount: bool = False,
    ):
        self.store = store
        self.clock = clock
        self.allow_zero_amount = allow_zero_amount

    def verify(
        self,
        service_type: str,
        amount: str,
        transaction_id: Optional[str] = None,
        verified_by: str = DEFAULT_VERIFIER,
    ) -> VerificationResult:
        transaction_id = (transaction_id or "").strip()
        if transaction_id:
            return self.verify_with_id(service_type, amount, transaction_id, verified_by)
        return self.verify_without_id(service_type, amount, verified_by)

    def verify_with_id(
        self,
        service_type: str,
        amount: str,
        transaction_id: str,
        verified_by: str = DEFAULT_VERIFIER,
    ) -> VerificationResult:
        service_type, amount = self._require(service_type, amount)
        transaction_id = (transaction_id or "").strip()
        if not transaction_id:
            raise InvalidPayload("Missing service, amount or transaction ID (txid)")

        existing = self.store.find_by_transaction_id(transaction_id)
        if existing is not None and existing.service_type.lower() != service_type.lower():
            existing = None

        # A settled reference never re-matches, whatever else is pending
        if existing is not None and existing.is_completed:
            return self._result(VerificationOutcome.ALREADY_COMPLETED, transaction_id)

        criteria = MatchCriteria(
            service_type=service_type,
            amount=normalize_amount(amount),
            transaction_id=transaction_id,
        )
        completed = self._try_complete(criteria, verified_by)
        if completed is not None:
            return self._result(
                VerificationOutcome.COMPLETED, completed.transaction_id, matched=1
            )

        if existing is not None and existing.status != TransactionStatus.PENDING.value:
            return self._result(VerificationOutcome.TRANSACTION_NOT_PENDING, transaction_id)

        return self._result(VerificationOutcome.NO_MATCH, transaction_id)

    def verify_without_id(
        self,
        service_type: str,
        amount: str,
        verified_by: str = DEFAULT_VERIFIER,
    ) -> VerificationResult:
        service_type, amount = self._require(service_type, amount)

        criteria = MatchCriteria(service_type=service_type, amount=normalize_amount(amount))
        completed = self._try_complete(criteria, verified_by)
        if completed is not None:
            return self._result(
                VerificationOutcome.COMPLETED, completed.transaction_id, matched=1
            )
        return self._result(VerificationOutcome.NO_MATCH, None)

    def check_status(self, transaction_id: str) -> StatusResult:
        transaction_id = (transaction_id or "").strip()
        if not transaction_id:
            raise InvalidPayload("Missing transaction ID")

        tx = self.store.find_by_transaction_id(transaction_id)
        if tx is None:
            raise TransactionNotFound("Transaction not found")
        return StatusResult(
            transaction_id=tx.transaction_id, status=tx.status, verified_at=tx.verified_at
        )

    # --- internals ---

    @staticmethod
    def _require(service_type: str, amount: str):
        service_type = (service_type or "").strip()
        amount = (amount or "").strip()
        if not service_type or not amount:
            raise InvalidPayload("Missing service or amount")
        return service_type, amount

    def _try_complete(self, criteria: MatchCriteria, verified_by: str):
        if criteria.amount == ZERO and not self.allow_zero_amount:
            logger.warning(
                "verify.zero_amount_refused",
                extra={"fields": {"service_type": criteria.service_type}},
            )
            return None
        return self.store.try_complete_one(criteria, verified_by or DEFAULT_VERIFIER, self.clock())

    def _result(self, outcome, transaction_id, matched=0) -> VerificationResult:
        logger.info(
            f"verify.{outcome.value.lower()}",
            extra={"fields": {"transaction_id": transaction_id}},
        )
        return VerificationResult(
            outcome=outcome,
            matched_records=matched,
            transaction_id=transaction_id,
        )
