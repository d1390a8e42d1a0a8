"""
Geocoding service for reverse geocoding location coordinates to human-readable addresses.
"""
import logging
from typing import Any, Optional

from geopy.exc import GeocoderQueryError, GeocoderServiceError
from geopy.geocoders import Nominatim

from app.core.exceptions import InvalidInputError, UpstreamError

# Configure logging
logger = logging.getLogger(__name__)

ADDRESS_NOT_FOUND = "Address not found"


class GeocodingService:
    def __init__(self, user_agent: str = "reportnow-server", timeout: int = 10, geocoder: Any = None):
        # Initialize Nominatim geocoder with a user agent
        self.geocoder = geocoder or Nominatim(user_agent=user_agent, timeout=timeout)

    def reverse_geocode(self, latitude: Optional[float], longitude: Optional[float]) -> str:
        """
        Convert latitude and longitude to a human-readable address.

        Args:
            latitude: Latitude coordinate
            longitude: Longitude coordinate

        Returns:
            Human-readable address string, or "Address not found" when the
            provider has no address for the point

        Raises:
            InvalidInputError: a coordinate is missing or out of range
            UpstreamError: the provider rejected the query (400) or could not
                be reached (500)
        """
        if not latitude or not longitude:
            raise InvalidInputError("Latitude and longitude are required")

        logger.info(f"Reverse geocoding coordinates: lat={latitude}, lon={longitude}")

        try:
            location = self.geocoder.reverse((latitude, longitude), exactly_one=True)
        except ValueError as e:
            logger.warning(f"Invalid coordinates: {e}")
            raise InvalidInputError(f"Invalid coordinates: {e}")
        except GeocoderQueryError as e:
            logger.error(f"Geocoding query rejected: {e}")
            raise UpstreamError(f"Failed to fetch address: {e}", status_code=400)
        except GeocoderServiceError as e:
            logger.error(f"Error in reverse geocoding: {e}")
            raise UpstreamError(f"Failed to fetch address: {e}", status_code=500)

        if location and getattr(location, "address", None):
            address = str(location.address)
            logger.info(f"Reverse geocoding successful: {address}")
            return address

        logger.warning(f"No address found for coordinates: lat={latitude}, lon={longitude}")
        return ADDRESS_NOT_FOUND
