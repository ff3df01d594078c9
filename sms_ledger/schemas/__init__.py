# sms_ledger/schemas/__init__.py

# 1. Ingestion & ledger records
from .transaction import (
    BackupCreate,
    IngestResponse,
    IngestResult,
    StatusResult,
    TransactionCreate,
    TransactionResponse,
)

# 2. Verification
from .verification import (
    OUTCOME_MESSAGES,
    VerificationOutcome,
    VerificationResponse,
    VerificationResult,
    VerifyRequest,
)

# 3. Dashboard statistics
from .stats import ServiceCount, StatisticsSnapshot
