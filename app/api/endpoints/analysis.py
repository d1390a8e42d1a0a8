from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Dict, Any, List
import logging

from app.core.exceptions import AppException
from app.models.report import INCIDENT_TYPES, ImageAnalysisRequest
from app.services.ai_service import ImageAnalysisService
from app.api.dependencies import get_image_analysis_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Image Analysis"])


@router.post("/analyze-image", response_model=Dict[str, Any])
def analyze_image(
    body: ImageAnalysisRequest,
    service: ImageAnalysisService = Depends(get_image_analysis_service)
):
    """Suggest a title, incident type and description for a report photo"""
    try:
        analysis = service.analyze(body.image)
    except AppException as e:
        logger.error(f"Error in analyze-image API: {e}")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    return analysis.to_response()


@router.get("/incident-types", response_model=List[str])
def list_incident_types():
    """Incident categories suggested to reporters"""
    return INCIDENT_TYPES
