import time

from fastapi import APIRouter

from shared_lib.utils import utc_now
from ..config import get_settings
from ..responses import api_response

router = APIRouter(prefix="/api/v1/healthcheck", tags=["healthcheck"])

STARTED_AT = time.monotonic()


@router.get("/")
async def healthcheck():
    status = {
        "status": "OK",
        "timestamp": utc_now(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": get_settings().ENVIRONMENT,
    }
    return api_response(200, status, "Health check successful")
