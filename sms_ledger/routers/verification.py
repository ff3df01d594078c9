from fastapi import APIRouter, Depends, Request

from sms_ledger import schemas
from sms_ledger.deps import get_verification_service, verifier_identity
from sms_ledger.services import VerificationService

router = APIRouter(tags=["Verification"])


# All four outcomes are answers, not failures: always 200.
@router.post("/verify", response_model=schemas.VerificationResponse)
def verify_payment(
    req: schemas.VerifyRequest,
    request: Request,
    service: VerificationService = Depends(get_verification_service),
):
    result = service.verify(
        req.service,
        req.amount,
        transaction_id=req.txid,
        verified_by=verifier_identity(request),
    )
    return schemas.VerificationResponse.from_result(result)
