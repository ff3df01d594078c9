from typing import List

from pydantic import BaseModel

from .transaction import TransactionResponse


class ServiceCount(BaseModel):
    service_type: str
    count: int


class StatisticsSnapshot(BaseModel):
    total_transactions: int
    today_transactions: int
    pending_transactions: int
    completed_transactions: int
    # Sum of canonical amounts over COMPLETED records, two decimals
    total_amount: str
    service_distribution: List[ServiceCount]
    recent_transactions: List[TransactionResponse]
