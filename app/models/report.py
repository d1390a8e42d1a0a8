from pydantic import BaseModel, Field, model_validator, validator
from typing import List, Optional
from datetime import datetime
from enum import Enum


class ReportType(str, Enum):
    EMERGENCY = "EMERGENCY"
    NON_EMERGENCY = "NON_EMERGENCY"


class ReportStatus(str, Enum):
    """Well-known lifecycle values. Stored status is not restricted to these."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


# Suggested categories offered to the reporter; not enforced on the record
INCIDENT_TYPES: List[str] = [
    "Theft",
    "Fire Outbreak",
    "Medical Emergency",
    "Natural Disaster",
    "Violence",
    "Other",
    "Lost Item",
    "Found Item",
    "Suspicious Activity",
    "Traffic Accident",
]


def validate_notification_email(wants_notifications: Optional[bool], email: Optional[str]) -> None:
    """Raise ValueError when notifications are requested without an email address"""
    if wants_notifications and (not email or not email.strip()):
        raise ValueError("Email is required when notifications are enabled")


class ReportCreate(BaseModel):
    """
    Body of a report submission.

    The required fields are optional here so that the service can reject
    their absence with a single message naming every missing field.
    """
    report_id: Optional[str] = Field(None, alias="reportId", max_length=64)
    report_type: Optional[ReportType] = Field(None, alias="reportType")
    incident_type: Optional[str] = Field(None, alias="incidentType", max_length=100)
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, max_length=500)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    image: Optional[str] = Field(None, description="Image as a base64 data URL")
    status: Optional[str] = None
    wants_notifications: bool = Field(False, alias="wantsNotifications")
    email: Optional[str] = Field(None, max_length=320)

    @validator("report_id", "title", "email", "incident_type", "location")
    def strip_text(cls, v):
        if v is None:
            return v
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def check_notification_email(self):
        validate_notification_email(self.wants_notifications, self.email)
        return self

    def missing_required_fields(self) -> List[str]:
        missing = []
        if not self.report_id:
            missing.append("reportId")
        if not self.report_type:
            missing.append("reportType")
        if not self.title:
            missing.append("title")
        return missing

    class Config:
        populate_by_name = True


class ReportStatusUpdate(BaseModel):
    status: Optional[str] = Field(None, max_length=50)


class Report(BaseModel):
    report_id: str = Field(..., alias="reportId")
    report_type: ReportType = Field(..., alias="reportType")
    incident_type: Optional[str] = Field(None, alias="incidentType")
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    latitude: float = 0
    longitude: float = 0
    image: Optional[str] = ""
    status: str = ReportStatus.PENDING.value
    wants_notifications: bool = Field(False, alias="wantsNotifications")
    email: Optional[str] = ""
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    def to_row(self) -> dict:
        """Column values for the reports table"""
        return self.model_dump(mode="json", exclude={"created_at", "updated_at"})

    def to_response(self) -> dict:
        """Record as returned by the API (camelCase keys)"""
        return self.model_dump(mode="json", by_alias=True)

    class Config:
        from_attributes = True
        populate_by_name = True


class ReportCreateResponse(BaseModel):
    success: bool
    report_id: str = Field(..., alias="reportId")
    message: str

    class Config:
        populate_by_name = True


class ImageAnalysisRequest(BaseModel):
    image: Optional[str] = None


class ImageAnalysis(BaseModel):
    title: str
    incident_type: str = Field(..., alias="incidentType")
    description: str
    degraded: bool = False
    reason: Optional[str] = None

    def to_response(self) -> dict:
        body = {
            "title": self.title,
            "incidentType": self.incident_type,
            "description": self.description,
        }
        if self.degraded:
            body["degraded"] = True
            body["reason"] = self.reason
        return body

    class Config:
        populate_by_name = True


class LocationRequest(BaseModel):
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class LocationResponse(BaseModel):
    address: str
