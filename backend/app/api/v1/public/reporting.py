"""
Public Reporting API.

Everything a reporter needs: submit a case, follow it, talk to the NGO.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from app.api.deps import get_core
from app.schemas.report import (
    ChatMessage,
    CreateReportRequest,
    MessageRequest,
    ReportDetail,
    ReporterSummary,
    RescueReport,
)
from app.services.rescue_core import RescueCore

router = APIRouter()


@router.post("", response_model=RescueReport, status_code=status.HTTP_201_CREATED)
async def create_report(request: CreateReportRequest, core: RescueCore = Depends(get_core)):
    """
    Submit a new rescue case. The AI triage note is attached when available.
    """
    return await core.submit_report(
        reporter_id=request.reporter_id,
        photo=request.photo,
        description=request.description,
        location=request.location,
        mime_type=request.mime_type,
    )


@router.get("/by-reporter/{reporter_id}", response_model=List[RescueReport])
async def read_reporter_reports(reporter_id: str, core: RescueCore = Depends(get_core)):
    return core.dashboard.reporter_reports(reporter_id)


@router.get("/by-reporter/{reporter_id}/summary", response_model=ReporterSummary)
async def read_reporter_summary(reporter_id: str, core: RescueCore = Depends(get_core)):
    return core.dashboard.reporter_summary(reporter_id)


@router.get("/{report_id}", response_model=RescueReport)
async def read_report(report_id: str, core: RescueCore = Depends(get_core)):
    return core.reports.get_by_id(report_id)


@router.get("/{report_id}/detail", response_model=ReportDetail)
async def read_report_detail(report_id: str, core: RescueCore = Depends(get_core)):
    """
    Report plus the reporter and assigned NGO records.
    """
    return core.dashboard.report_detail(report_id)


@router.get("/{report_id}/messages", response_model=List[ChatMessage])
async def read_messages(report_id: str, core: RescueCore = Depends(get_core)):
    return core.conversations.list_messages(report_id)


@router.post("/{report_id}/messages", response_model=ChatMessage, status_code=status.HTTP_201_CREATED)
async def send_message(report_id: str, request: MessageRequest, core: RescueCore = Depends(get_core)):
    """
    Append a message to the report thread (reporter or NGO).
    """
    return await core.conversations.append_message(report_id, request.sender_id, request.text)
