from typing import Any, List

from fastapi import APIRouter, Body, Depends, Request, status

from sms_ledger import schemas
from sms_ledger.deps import client_ip, get_ingestion_service, get_store, get_verification_service
from sms_ledger.services import IngestionService, VerificationService
from sms_ledger.store import LedgerStore

router = APIRouter(tags=["Transactions"])


def ingest_response(result: schemas.IngestResult) -> schemas.IngestResponse:
    if result.is_new:
        return schemas.IngestResponse(
            status="PENDING",
            record_status=result.status,
            transaction_id=result.transaction_id,
            is_new=True,
            message="Transaction saved as PENDING",
        )
    return schemas.IngestResponse(
        status="EXISTS",
        record_status=result.status,
        transaction_id=result.transaction_id,
        is_new=False,
        message="Transaction already exists",
    )


# --- 1. INGEST A PARSED SMS (mobile client) ---
@router.post("/transactions", response_model=schemas.IngestResponse)
def ingest_transaction(
    request: Request,
    payload: Any = Body(...),
    service: IngestionService = Depends(get_ingestion_service),
):
    result = service.ingest(
        payload,
        ip_address=client_ip(request),
        device_info=request.headers.get("user-agent"),
    )
    return ingest_response(result)


# --- 2. STATUS OF ONE REFERENCE ---
@router.get("/transactions/{transaction_id}/status", response_model=schemas.StatusResult)
def transaction_status(
    transaction_id: str,
    service: VerificationService = Depends(get_verification_service),
):
    return service.check_status(transaction_id)


# --- 3. RAW SMS BACKUP (audit trail) ---
@router.post("/backups", status_code=status.HTTP_201_CREATED)
def save_backup(
    request: Request,
    backup: schemas.BackupCreate,
    service: IngestionService = Depends(get_ingestion_service),
):
    record = service.save_backup(backup.sms_data, ip_address=client_ip(request))
    return {"success": True, "id": record.id}


@router.get("/backups")
def list_backups(store: LedgerStore = Depends(get_store)) -> List[dict]:
    return [
        {
            "id": b.id,
            "sms_data": b.sms_data,
            "ip_address": b.ip_address,
            "created_at": b.created_at,
        }
        for b in store.list_backups()
    ]
