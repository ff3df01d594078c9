import json
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from sms_ledger.core.database import utcnow
from sms_ledger.core.errors import InvalidPayload
from sms_ledger.core.logger import get_logger
from sms_ledger.models import BackupSms, Transaction, TransactionStatus
from sms_ledger.schemas import IngestResult, TransactionCreate
from sms_ledger.store import LedgerStore

logger = get_logger("sms_ledger.ingest")

RawPayload = Union[str, bytes, Mapping[str, Any]]


def parse_transaction_payload(raw: RawPayload) -> TransactionCreate:
    """
    Deserialize what the mobile client posted.
    Accepts the JSON text it sends in the ``data`` form field, or an already decoded mapping.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise InvalidPayload("Invalid JSON data")

    if not isinstance(raw, Mapping):
        raise InvalidPayload("Transaction data must be a JSON object")

    try:
        return TransactionCreate.model_validate(dict(raw))
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise InvalidPayload(f"Invalid transaction fields: {', '.join(fields)}")


# Free-text SMS body; every other text field is short
LONG_FIELDS = ("original_message",)


class IngestionService:
    def __init__(
        self,
        store: LedgerStore,
        clock: Callable = utcnow,
        max_field_length: int = 255,
        max_message_length: int = 4000,
    ):
        self.store = store
        self.clock = clock
        self.max_field_length = max_field_length
        self.max_message_length = max_message_length

    def _check_lengths(self, payload: TransactionCreate) -> None:
        too_long = []
        for name, value in payload.model_dump().items():
            limit = self.max_message_length if name in LONG_FIELDS else self.max_field_length
            if len(value) > limit:
                too_long.append(name)
        if too_long:
            raise InvalidPayload(f"Invalid transaction fields: {', '.join(sorted(too_long))}")

    def ingest(
        self,
        raw: RawPayload,
        *,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
    ) -> IngestResult:
        payload = parse_transaction_payload(raw)
        self._check_lengths(payload)

        tx = Transaction(
            **payload.model_dump(),
            ip_address=ip_address,
            device_info=(device_info or "Unknown")[: self.max_field_length],
            status=TransactionStatus.PENDING.value,
            created_at=self.clock(),
            verified_at=None,
            verified_by=None,
        )

        # Re-delivery of the same notification must not create a second record
        outcome = self.store.insert_if_absent(tx)
        if not outcome.inserted:
            existing = outcome.existing
            logger.info(
                "ingest.duplicate",
                extra={
                    "fields": {
                        "transaction_id": existing.transaction_id,
                        "status": existing.status,
                    }
                },
            )
            return IngestResult(
                status=existing.status,
                transaction_id=existing.transaction_id,
                is_new=False,
            )

        logger.info(
            "ingest.saved",
            extra={
                "fields": {
                    "record_id": tx.id,
                    "transaction_id": tx.transaction_id,
                    "service_type": tx.service_type,
                }
            },
        )
        return IngestResult(
            status=TransactionStatus.PENDING.value,
            transaction_id=tx.transaction_id,
            is_new=True,
        )

    def save_backup(self, sms_data: str, *, ip_address: Optional[str] = None) -> BackupSms:
        if not sms_data or not sms_data.strip():
            raise InvalidPayload("Missing SMS data")
        if len(sms_data) > self.max_message_length:
            raise InvalidPayload("SMS data too long")

        record = self.store.append_backup(
            BackupSms(sms_data=sms_data, ip_address=ip_address, created_at=self.clock())
        )
        logger.debug("ingest.backup_saved", extra={"fields": {"backup_id": record.id}})
        return record
