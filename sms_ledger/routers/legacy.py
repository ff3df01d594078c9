"""
Single form-encoded endpoint spoken by the deployed Android client:
``POST /api`` with ``action=<name>`` and the action's fields.

``clear_database`` wipes the ledger like ``POST /sys/clear-ledger`` and needs
the same ``admin_key``.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse

from sms_ledger.core.config import Settings
from sms_ledger.core.errors import InvalidPayload
from sms_ledger.core.logger import get_logger
from sms_ledger.deps import (
    client_ip,
    get_ingestion_service,
    get_settings,
    get_statistics_service,
    get_store,
    get_verification_service,
    verifier_identity,
)
from sms_ledger.schemas import OUTCOME_MESSAGES, VerificationResult
from sms_ledger.services import IngestionService, StatisticsService, VerificationService
from sms_ledger.store import LedgerStore

logger = get_logger("sms_ledger.api")

router = APIRouter(tags=["Mobile client"])


def _verification_body(result: VerificationResult, include_reference: bool) -> dict:
    message = OUTCOME_MESSAGES[result.outcome]
    if not result.success:
        return {"success": False, "error": result.outcome.value, "message": message}

    body = {
        "success": True,
        "matched_records": result.matched_records,
        "message": message,
        "status": "COMPLETED",
    }
    if include_reference:
        body["transaction_id"] = result.transaction_id
    return body


@router.post("/api")
def dispatch_action(
    request: Request,
    action: str = Form(""),
    data: Optional[str] = Form(None),
    sms_data: Optional[str] = Form(None),
    service: Optional[str] = Form(None),
    amount: Optional[str] = Form(None),
    txid: Optional[str] = Form(None),
    admin_key: Optional[str] = Form(None),
    ingestion: IngestionService = Depends(get_ingestion_service),
    verification: VerificationService = Depends(get_verification_service),
    statistics: StatisticsService = Depends(get_statistics_service),
    store: LedgerStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    # --- 1. INGESTION ---
    if action == "save_transaction":
        if not data:
            raise InvalidPayload("Missing transaction data")
        result = ingestion.ingest(
            data,
            ip_address=client_ip(request),
            device_info=request.headers.get("user-agent"),
        )
        if result.is_new:
            return {
                "success": True,
                "message": "Transaction saved as PENDING",
                "transaction_id": result.transaction_id,
                "status": "PENDING",
            }
        return {
            "success": True,
            "message": "Transaction already exists",
            "transaction_id": result.transaction_id,
            "status": result.status,
        }

    if action == "save_backup":
        ingestion.save_backup(sms_data or "", ip_address=client_ip(request))
        return {"success": True, "message": "Backup SMS saved"}

    # --- 2. VERIFICATION ---
    if action == "verify_payment":
        if not (txid or "").strip():
            raise InvalidPayload("Missing service, amount or transaction ID (txid)")
        result = verification.verify_with_id(
            service, amount, txid, verified_by=verifier_identity(request)
        )
        return _verification_body(result, include_reference=False)

    if action == "verify_payment_without_txid":
        result = verification.verify_without_id(
            service, amount, verified_by=verifier_identity(request)
        )
        return _verification_body(result, include_reference=True)

    if action == "check_transaction_status":
        found = verification.check_status(txid or "")
        return {"success": True, "status": found.status, "verified_at": found.verified_at}

    # --- 3. DASHBOARD ---
    if action == "get_stats":
        return statistics.snapshot()

    # --- 4. ADMIN ---
    if action == "clear_database":
        if admin_key != settings.ADMIN_RESET_KEY:
            return JSONResponse(
                status_code=403, content={"success": False, "error": "Access denied"}
            )
        store.clear_all()
        logger.warning("api.ledger_cleared", extra={"fields": {"ip": client_ip(request)}})
        return {"success": True, "message": "Database cleared successfully"}

    return JSONResponse(status_code=400, content={"success": False, "error": "Invalid action"})
