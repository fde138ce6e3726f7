"""
Observability endpoints for the palette service.

Exposes the in-process metrics collected during palette generation.
"""

from fastapi import APIRouter, HTTPException

from palette_service.config import config
from palette_service.schemas import MetricsSummaryResponse
from palette_service.utils.metrics import get_metrics


router = APIRouter(prefix="/metrics", tags=["observability"])


@router.get("/summary", response_model=MetricsSummaryResponse)
async def get_metrics_summary():
    """Get counters, timing statistics and palette size statistics."""
    if not config.METRICS_ENABLED:
        raise HTTPException(status_code=404, detail="Metrics are disabled")
    return MetricsSummaryResponse(**get_metrics().get_summary())
