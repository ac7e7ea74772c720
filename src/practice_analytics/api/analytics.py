"""
Analytics API endpoints.

Thin transport over the analytics engine: the caller posts the collections it
already retrieved and receives the dashboard snapshot as JSON.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException
from fastapi import status as http_status
from pydantic import BaseModel, ConfigDict, Field

from practice_analytics.core.config import ANALYTICS_DEFAULT_TOP_PATIENTS
from practice_analytics.services.analytics_engine import AnalyticsEngine
from practice_analytics.services.analytics_period import InvalidRangeError
from practice_analytics.services.analytics_types import Snapshot
from practice_analytics.utils.datetime_utils import local_now

logger = logging.getLogger(__name__)

router = APIRouter()

engine = AnalyticsEngine()


class DateRangeRequest(BaseModel):
    """Explicit period bounds; date-only values cover whole days."""
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str


class AnalyticsSnapshotRequest(BaseModel):
    """Request body for snapshot computation."""
    appointments: List[Dict[str, Any]] = Field(default_factory=list)
    payments: List[Dict[str, Any]] = Field(default_factory=list)
    patients: List[Dict[str, Any]] = Field(default_factory=list)
    time_range: Union[str, DateRangeRequest] = "month"  # week, month, quarter, year or {from, to}
    reference_date: Optional[str] = None  # ISO date or datetime
    top_patients_limit: int = Field(default=ANALYTICS_DEFAULT_TOP_PATIENTS, ge=0, le=100)


@router.post(
    "/snapshot",
    summary="Compute dashboard snapshot",
    description="Aggregate appointments, payments and patients into dashboard stats and chart series",
    response_model=Snapshot,
)
async def compute_analytics_snapshot(request: AnalyticsSnapshotRequest) -> Snapshot:
    """
    Compute the analytics snapshot for the requested period.

    Raises:
        HTTPException: 400 if the period cannot be resolved
    """
    if isinstance(request.time_range, DateRangeRequest):
        time_range: Any = {"from": request.time_range.from_, "to": request.time_range.to}
    else:
        time_range = request.time_range

    reference_date = request.reference_date if request.reference_date is not None else local_now(engine.tz)

    try:
        snapshot = engine.compute(
            {
                "appointments": request.appointments,
                "payments": request.payments,
                "patients": request.patients,
            },
            time_range,
            reference_date,
            request.top_patients_limit,
        )
    except InvalidRangeError as e:
        logger.info(f"Rejected analytics request: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return snapshot
