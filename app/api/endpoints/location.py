from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from app.core.exceptions import AppException
from app.models.report import LocationRequest, LocationResponse
from app.services.geocoding_service import GeocodingService
from app.api.dependencies import get_geocoding_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Location"])


@router.post("/get-current-location", response_model=LocationResponse)
def get_current_location(
    body: LocationRequest,
    service: GeocodingService = Depends(get_geocoding_service)
):
    """Reverse geocode the reporter's coordinates"""
    try:
        address = service.reverse_geocode(body.latitude, body.longitude)
    except AppException as e:
        logger.error(f"Error in get-current-location API: {e}")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    return LocationResponse(address=address)
