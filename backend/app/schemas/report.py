from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Union
from datetime import datetime
import enum

from app.schemas.actor import Reporter, NGO
from app.core.time_utils import to_utc


class ReportStatus(str, enum.Enum):
    PENDING = 'Pending'
    ACCEPTED = 'Accepted'
    IN_PROGRESS = 'In Progress'
    RESCUED = 'Rescued'
    DECLINED = 'Declined'
    CLOSED = 'Closed'


class Geolocation(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ChatMessage(BaseModel):
    id: str
    sender_id: str
    text: str = Field(..., min_length=1)
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        return to_utc(v)


class RescueReport(BaseModel):
    """
    A rescue case. Stored as a plain dict by the persistence layer,
    datetimes travel as ISO-8601 strings.
    """
    id: str
    reporter_id: str
    photo: str = Field(..., description="Base64 payload or image URL")
    description: str
    location: Geolocation
    status: ReportStatus = ReportStatus.PENDING
    assigned_ngo_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    triage_note: Optional[str] = None
    conversation: List[ChatMessage] = Field(default_factory=list)

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        return to_utc(v)


# API payloads

class CreateReportRequest(BaseModel):
    reporter_id: str
    photo: str = Field(..., description="Base64 encoded image")
    mime_type: str = "image/jpeg"
    description: str = Field(..., min_length=1)
    location: Geolocation


class StatusUpdateRequest(BaseModel):
    status: ReportStatus
    ngo_id: str


class MessageRequest(BaseModel):
    sender_id: str
    text: str


class ReportDetail(BaseModel):
    report: RescueReport
    reporter: Optional[Reporter] = None
    ngo: Optional[NGO] = None


class ReporterSummary(BaseModel):
    reporter: Reporter
    total_reports: int
    reports_by_status: Dict[ReportStatus, int]
