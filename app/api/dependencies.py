from fastapi import Request

from app.services.ai_service import ImageAnalysisService
from app.services.geocoding_service import GeocodingService
from app.services.notification_service import NotificationService
from app.services.report_service import ReportService


# Services are built once in the application lifespan and kept on app.state

def get_image_analysis_service(request: Request) -> ImageAnalysisService:
    return request.app.state.image_analysis_service


def get_geocoding_service(request: Request) -> GeocodingService:
    return request.app.state.geocoding_service


def get_report_service(request: Request) -> ReportService:
    return request.app.state.report_service


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service
