from typing import Any, List

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_core
from app.schemas.report import RescueReport, StatusUpdateRequest
from app.services.rescue_core import RescueCore

router = APIRouter()


@router.get("/", response_model=List[RescueReport])
async def read_reports(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    core: RescueCore = Depends(get_core),
) -> Any:
    """
    Retrieve every report, newest first.
    """
    return core.reports.list_all()[skip:skip + limit]


@router.get("/ngo/{ngo_id}", response_model=List[RescueReport])
async def read_ngo_dashboard(ngo_id: str, core: RescueCore = Depends(get_core)) -> Any:
    """
    Pending reports plus the ones this NGO has taken on.
    """
    return core.dashboard.ngo_reports(ngo_id)


@router.post("/{report_id}/status", response_model=RescueReport)
async def update_report_status(
    report_id: str,
    request: StatusUpdateRequest,
    core: RescueCore = Depends(get_core),
) -> Any:
    """
    NGO moves a report along its lifecycle.
    """
    return await core.lifecycle.update_status(report_id, request.status, request.ngo_id)


@router.post("/{report_id}/close", response_model=RescueReport)
async def close_report(report_id: str, core: RescueCore = Depends(get_core)) -> Any:
    """
    Administrative close.
    """
    return await core.lifecycle.close(report_id)
