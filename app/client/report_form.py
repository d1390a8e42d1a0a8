"""
Report submission workflow.

Client for the ReportNow API that stages a report the way the submission
form does: an optional photo is analyzed to pre-fill the text fields, the
reporter's coordinates are turned into an address, and the assembled report
is validated against the same schema the server uses before it is posted.
"""
import base64
import io
import logging
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import requests
from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError as PydanticValidationError

from app.core.security import generate_report_id
from app.models.report import ReportCreate, ReportStatus, ReportType

logger = logging.getLogger(__name__)

ANALYSIS_FAILED = "Failed to analyze image. Please try again or fill details manually."
ADDRESS_FAILED = "Failed to fetch address details."
SUBMIT_FAILED = "Something went wrong."


class FormState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def detect_image_type(data: bytes) -> Optional[str]:
    """MIME type of image bytes, or None if they are not an image"""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return Image.MIME.get(img.format)
    except (UnidentifiedImageError, OSError):
        return None


def _error_from_response(error: requests.RequestException, default: str) -> str:
    response = getattr(error, "response", None)
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            return default
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
    return default


class ReportForm:
    """
    One report being filled in.

    The report id is generated once, when the form is created. Image analysis
    and geocoding are optional and independent of each other; ``submit`` only
    waits on validation.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        on_complete: Optional[Callable[[str], None]] = None,
        timeout: int = 30,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.on_complete = on_complete
        self.timeout = timeout

        self.report_id = generate_report_id()
        self.report_type: Optional[ReportType] = None
        self.incident_type = ""
        self.title = ""
        self.description = ""
        self.location = ""
        self.latitude: Optional[float] = None
        self.longitude: Optional[float] = None
        self.image: Optional[str] = None
        self.status = ReportStatus.PENDING.value
        self.wants_notifications = False
        self.email = ""

        self.state = FormState.IDLE
        self.error = ""

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = self.session.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def attach_image(self, image: Union[str, Path, bytes], mime_type: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Analyze a photo and fill title, description and incident type from it.

        Non-image input is ignored. On failure the fields are left as they
        were, ``error`` is set and the photo is not staged.
        """
        if isinstance(image, (str, Path)):
            path = Path(image)
            data = path.read_bytes()
            mime_type = mime_type or mimetypes.guess_type(path.name)[0]
        else:
            data = image
        mime_type = mime_type or detect_image_type(data)

        if not mime_type or not mime_type.startswith("image/"):
            logger.warning("Ignoring attachment that is not an image")
            return None

        data_url = to_data_url(data, mime_type)
        self.error = ""
        try:
            result = self._post("/api/analyze-image", {"image": data_url})
        except requests.RequestException as e:
            logger.error(f"Error in analyzing image: {e}")
            self.error = _error_from_response(e, ANALYSIS_FAILED)
            return None

        self.title = result.get("title") or ""
        self.description = result.get("description") or ""
        self.incident_type = result.get("incidentType") or ""
        self.image = data_url
        return result

    def remove_image(self) -> None:
        self.image = None

    def use_location(self, latitude: float, longitude: float) -> Optional[str]:
        """Record the reporter's coordinates and look up their address"""
        self.error = ""
        self.latitude = latitude
        self.longitude = longitude

        try:
            result = self._post(
                "/api/get-current-location",
                {"latitude": latitude, "longitude": longitude},
            )
        except requests.RequestException as e:
            logger.error(f"Error fetching address: {e}")
            self.error = _error_from_response(e, ADDRESS_FAILED)
            return None

        address = result.get("address")
        if not address:
            self.error = "Address not found for this location."
            return None

        self.location = address
        return address

    def payload(self) -> Dict[str, Any]:
        """Request body for the create endpoint"""
        return {
            "reportId": self.report_id,
            "reportType": self.report_type.value if isinstance(self.report_type, ReportType) else self.report_type,
            "incidentType": self.incident_type,
            "location": self.location,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "status": self.status,
            "wantsNotifications": self.wants_notifications,
            "email": self.email,
        }

    def validate(self) -> List[str]:
        """Errors that would stop submission, using the server's schema"""
        try:
            report = ReportCreate.model_validate(self.payload())
        except PydanticValidationError as e:
            return [str(err.get("msg", "")).removeprefix("Value error, ") for err in e.errors()]

        missing = report.missing_required_fields()
        if missing:
            return [f"Missing required fields: {', '.join(missing)}"]
        return []

    def submit(self) -> Optional[str]:
        """
        Post the report.

        Returns the report id on success. On failure the form goes back to
        idle with ``error`` set; nothing is retried.
        """
        if self.state == FormState.SUBMITTING:
            return None

        errors = self.validate()
        if errors:
            self.error = errors[0]
            return None

        self.state = FormState.SUBMITTING
        self.error = ""
        try:
            result = self._post("/api/reports/create", self.payload())
        except requests.RequestException as e:
            logger.error(f"Error in submitting report: {e}")
            self.error = _error_from_response(e, SUBMIT_FAILED)
            self.state = FormState.IDLE
            return None

        self.state = FormState.SUCCESS
        report_id = result.get("reportId", self.report_id)
        if self.on_complete:
            self.on_complete(report_id)
        return report_id
