from fastapi import APIRouter

from hoarding_api.config import APP_VERSION
from hoarding_api.utils.dates import utcnow_iso
from hoarding_api.utils.response import success_response

SERVICE_NAME = "hoarding-api"

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    return success_response(
        data={"service": SERVICE_NAME, "version": APP_VERSION, "timestamp": utcnow_iso()},
        message="Hoarding API is running",
    )
