from fastapi import APIRouter, Depends

from sms_ledger import schemas
from sms_ledger.deps import get_statistics_service
from sms_ledger.services import StatisticsService

router = APIRouter(tags=["Statistics"])


@router.get("/stats", response_model=schemas.StatisticsSnapshot)
def get_statistics(service: StatisticsService = Depends(get_statistics_service)):
    return service.snapshot()
