from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- 1. WHAT THE MOBILE CLIENT SENDS ---
# Fields arrive already parsed from the SMS. Missing text fields become "".
# Length limits are configurable, so IngestionService enforces them, not the schema.
class TransactionCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sender: str = ""
    amount: str = ""
    transaction_id: str = ""
    account_number: str = ""
    reference: str = ""
    service_type: str = "Other"
    transaction_type: str = "Unknown"
    sim_info: str = ""
    original_message: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def amount_as_text(cls, value):
        # Some handsets send the parsed amount as a JSON number
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float, Decimal)):
            # positional notation, never "1e+16"
            return format(Decimal(str(value)), "f")
        return value

    @field_validator(
        "sender",
        "amount",
        "transaction_id",
        "account_number",
        "reference",
        "sim_info",
        "original_message",
        mode="before",
    )
    @classmethod
    def none_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("service_type", "transaction_type", mode="before")
    @classmethod
    def none_as_default(cls, value, info):
        if value is None or (isinstance(value, str) and not value.strip()):
            return "Other" if info.field_name == "service_type" else "Unknown"
        return value

    @field_validator("transaction_id")
    @classmethod
    def strip_reference(cls, value: str) -> str:
        return value.strip()


# --- 2. WHAT THE API RETURNS ---
class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transaction_id: str
    sender: str
    amount: str
    amount_canonical: Decimal
    account_number: str
    reference: str
    service_type: str
    transaction_type: str
    sim_info: str
    original_message: str
    status: str
    created_at: datetime
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None


class IngestResult(BaseModel):
    # status of the stored record (PENDING / COMPLETED)
    status: str
    transaction_id: str
    is_new: bool


class IngestResponse(BaseModel):
    success: bool = True
    # "PENDING" for a new record, "EXISTS" for a re-delivery
    status: str
    record_status: str
    transaction_id: str
    is_new: bool
    message: str


class StatusResult(BaseModel):
    transaction_id: str
    status: str
    verified_at: Optional[datetime] = None


# --- 3. RAW SMS BACKUP ---
class BackupCreate(BaseModel):
    sms_data: str = Field(..., min_length=1)
