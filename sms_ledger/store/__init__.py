from sms_ledger.core.config import Settings
from sms_ledger.core.database import build_engine

from .base import InsertOutcome, LedgerStore, MatchCriteria
from .memory import MemoryLedgerStore
from .sql import SqlLedgerStore


def build_store(settings: Settings) -> LedgerStore:
    """Build the one ledger store this process will use."""
    backend = settings.LEDGER_BACKEND.lower()
    if backend == "memory":
        return MemoryLedgerStore(backup_retention=settings.BACKUP_RETENTION)
    if backend == "sql":
        return SqlLedgerStore(
            build_engine(settings.database_url),
            backup_retention=settings.BACKUP_RETENTION,
        )
    raise ValueError(f"Unknown LEDGER_BACKEND '{settings.LEDGER_BACKEND}' (expected 'sql' or 'memory')")


__all__ = [
    "InsertOutcome",
    "LedgerStore",
    "MatchCriteria",
    "MemoryLedgerStore",
    "SqlLedgerStore",
    "build_store",
]
