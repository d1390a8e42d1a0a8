from .report import (
    INCIDENT_TYPES,
    ImageAnalysis,
    ImageAnalysisRequest,
    LocationRequest,
    LocationResponse,
    Report,
    ReportCreate,
    ReportCreateResponse,
    ReportStatus,
    ReportStatusUpdate,
    ReportType,
    validate_notification_email,
)

__all__ = [
    "INCIDENT_TYPES",
    "ImageAnalysis",
    "ImageAnalysisRequest",
    "LocationRequest",
    "LocationResponse",
    "Report",
    "ReportCreate",
    "ReportCreateResponse",
    "ReportStatus",
    "ReportStatusUpdate",
    "ReportType",
    "validate_notification_email",
]
