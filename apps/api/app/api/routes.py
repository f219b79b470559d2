from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import Response

from app.core.config import get_settings
from app.metrics import generate_metrics_payload, metrics_content_type
from app.sales.api import dashboard_router, opportunities_router, users_router
from app.sales.schemas import HealthcheckRead

router = APIRouter()
router.include_router(users_router)
router.include_router(opportunities_router)
router.include_router(dashboard_router)


@router.get("/api/healthcheck", response_model=HealthcheckRead, tags=["system"])
def healthcheck() -> HealthcheckRead:
    return HealthcheckRead(status="ok", timestamp=datetime.now(timezone.utc))


@router.get("/metrics", tags=["system"])
def metrics() -> Response:
    settings = get_settings()
    if not settings.metrics_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
    return Response(content=generate_metrics_payload(), media_type=metrics_content_type())
