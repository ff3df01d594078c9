from .ingestion import IngestionService, parse_transaction_payload
from .statistics import StatisticsService, compute_statistics
from .verification import VerificationService

__all__ = [
    "IngestionService",
    "StatisticsService",
    "VerificationService",
    "compute_statistics",
    "parse_transaction_payload",
]
