from fastapi import Depends, Request

from sms_ledger.core.config import Settings
from sms_ledger.services import IngestionService, StatisticsService, VerificationService
from sms_ledger.store import LedgerStore


# The store and settings are built once in main.create_app and parked on app.state
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> LedgerStore:
    return request.app.state.store


def get_ingestion_service(
    store: LedgerStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> IngestionService:
    return IngestionService(
        store,
        max_field_length=settings.MAX_FIELD_LENGTH,
        max_message_length=settings.MAX_MESSAGE_LENGTH,
    )


def get_verification_service(
    store: LedgerStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> VerificationService:
    return VerificationService(store, allow_zero_amount=settings.ALLOW_ZERO_AMOUNT_MATCH)


def get_statistics_service(
    store: LedgerStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> StatisticsService:
    return StatisticsService(
        store,
        timezone=settings.LEDGER_TIMEZONE,
        recent_limit=settings.RECENT_TRANSACTIONS_LIMIT,
    )


def client_ip(request: Request) -> str:
    # First hop of X-Forwarded-For when behind a proxy
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "0.0.0.0"


def verifier_identity(request: Request) -> str:
    if request.client and request.client.host:
        return request.client.host
    return "API"
