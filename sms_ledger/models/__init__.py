from .backup import BackupSms
from .transaction import ALLOWED_TRANSITIONS, Transaction, TransactionStatus, can_transition

__all__ = [
    "ALLOWED_TRANSITIONS",
    "BackupSms",
    "Transaction",
    "TransactionStatus",
    "can_transition",
]
