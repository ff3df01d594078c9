from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Dict, List, Sequence
from zoneinfo import ZoneInfo

from sms_ledger.amounts import format_amount
from sms_ledger.core.database import utcnow
from sms_ledger.models import Transaction
from sms_ledger.schemas import ServiceCount, StatisticsSnapshot, TransactionResponse
from sms_ledger.store import LedgerStore
from sms_ledger.store.base import newest_first_key


def service_distribution(records: Sequence[Transaction]) -> List[ServiceCount]:
    """
    COMPLETED records per provider, most used first.
    Labels are grouped case-insensitively and shown with their first-seen spelling;
    equal counts keep first-seen order.
    """
    labels: Dict[str, str] = {}
    counts: Dict[str, int] = {}
    for tx in records:
        if not tx.is_completed:
            continue
        key = (tx.service_type or "").lower()
        labels.setdefault(key, tx.service_type)
        counts[key] = counts.get(key, 0) + 1

    # sorted() is stable, dict order is first-seen
    ordered = sorted(counts.items(), key=lambda item: -item[1])
    return [ServiceCount(service_type=labels[key], count=count) for key, count in ordered]


def compute_statistics(
    records: Sequence[Transaction],
    today: date,
    tz: ZoneInfo,
    recent_limit: int = 0,
) -> StatisticsSnapshot:
    pending = sum(1 for tx in records if tx.is_pending)
    completed = [tx for tx in records if tx.is_completed]
    today_count = sum(1 for tx in records if tx.created_at.astimezone(tz).date() == today)
    total_amount = sum((tx.amount_canonical for tx in completed), Decimal("0"))

    recent = sorted(records, key=newest_first_key, reverse=True)
    if recent_limit > 0:
        recent = recent[:recent_limit]

    return StatisticsSnapshot(
        total_transactions=len(records),
        today_transactions=today_count,
        pending_transactions=pending,
        completed_transactions=len(completed),
        total_amount=format_amount(total_amount),
        service_distribution=service_distribution(records),
        recent_transactions=[TransactionResponse.model_validate(tx) for tx in recent],
    )


class StatisticsService:
    def __init__(
        self,
        store: LedgerStore,
        timezone: str = "Asia/Dhaka",
        recent_limit: int = 50,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.tz = ZoneInfo(timezone)
        self.recent_limit = recent_limit
        self.clock = clock

    def snapshot(self) -> StatisticsSnapshot:
        today = self.clock().astimezone(self.tz).date()
        return compute_statistics(self.store.list_all(), today, self.tz, self.recent_limit)
