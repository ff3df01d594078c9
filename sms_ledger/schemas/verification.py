import enum
from typing import Optional

from pydantic import BaseModel, Field


class VerificationOutcome(str, enum.Enum):
    COMPLETED = "COMPLETED"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    TRANSACTION_NOT_PENDING = "TRANSACTION_NOT_PENDING"
    NO_MATCH = "NO_MATCH"


OUTCOME_MESSAGES = {
    VerificationOutcome.COMPLETED: "Transaction verified and marked as COMPLETED",
    VerificationOutcome.ALREADY_COMPLETED: "This transaction has already been verified and completed",
    VerificationOutcome.TRANSACTION_NOT_PENDING: "Transaction found but not in PENDING state",
    VerificationOutcome.NO_MATCH: "No matching PENDING transaction found",
}


class VerifyRequest(BaseModel):
    service: str = Field(..., min_length=1, max_length=255)
    amount: str = Field(..., min_length=1, max_length=255)
    # Omitted or empty -> match on service + amount only
    txid: Optional[str] = Field(default=None, max_length=255)


class VerificationResult(BaseModel):
    outcome: VerificationOutcome
    matched_records: int = 0
    # Reference of the consumed record; set on COMPLETED
    transaction_id: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.outcome == VerificationOutcome.COMPLETED


class VerificationResponse(BaseModel):
    success: bool
    outcome: VerificationOutcome
    status: Optional[str] = None
    matched_records: int
    transaction_id: Optional[str] = None
    message: str

    @classmethod
    def from_result(cls, result: VerificationResult) -> "VerificationResponse":
        return cls(
            success=result.success,
            outcome=result.outcome,
            status="COMPLETED" if result.success else None,
            matched_records=result.matched_records,
            transaction_id=result.transaction_id,
            message=OUTCOME_MESSAGES[result.outcome],
        )
