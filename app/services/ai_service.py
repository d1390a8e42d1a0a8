"""
Image analysis service.

Sends a reported photo to a Gemini model and turns the labelled text it
returns into a title, incident type and description for the report form.
"""
import base64
import binascii
import io
import logging
import re
from typing import Any, Optional, Tuple

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from PIL import Image, UnidentifiedImageError

from app.core.exceptions import ConfigurationError, InvalidInputError, ServiceError, ValidationError
from app.models.report import ImageAnalysis

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(.+);base64,(.+)$", re.DOTALL)

ANALYSIS_PROMPT = """Analyze this emergency situation image and respond in this exact format without any asterisks or bullet points:
TITLE: Write a clear, brief title
TYPE: Choose one (Theft, Fire Outbreak, Medical Emergency, Natural Disaster, Violence, or Other)
DESCRIPTION: Write a clear, concise description"""

DEFAULT_TITLE = "Report"
DEFAULT_INCIDENT_TYPE = "Other"
DESCRIPTION_FALLBACK_LENGTH = 100

# Returned when the model is out of quota or does not exist
FALLBACK_ANALYSIS = {
    "title": "Emergency Incident",
    "incident_type": "Other",
    "description": "Emergency",
}

_LABEL_PATTERNS = {
    "title": re.compile(r"^[ \t]*TITLE:[ \t]*(.+)$", re.MULTILINE),
    "incident_type": re.compile(r"^[ \t]*TYPE:[ \t]*(.+)$", re.MULTILINE),
    "description": re.compile(r"^[ \t]*DESCRIPTION:[ \t]*(.+)$", re.MULTILINE),
}

_UNAVAILABLE_MARKERS = ("429", "quota", "404")


def parse_data_url(data_url: str) -> Tuple[str, bytes]:
    """
    Split a ``data:<mime>;base64,<data>`` string into its MIME type and bytes.

    Raises:
        InvalidInputError: if the string does not have that shape
    """
    if not isinstance(data_url, str):
        raise InvalidInputError("Invalid image data format. Expected base64 data URL.")

    match = DATA_URL_PATTERN.match(data_url.strip())
    if not match:
        raise InvalidInputError("Invalid image data format. Expected base64 data URL.")

    mime_type, payload = match.group(1), match.group(2)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInputError("Invalid image data format. Payload is not valid base64.")

    return mime_type, data


def parse_analysis_text(text: str) -> ImageAnalysis:
    """Pull the TITLE, TYPE and DESCRIPTION lines out of a model response"""
    fields = {}
    for name, pattern in _LABEL_PATTERNS.items():
        match = pattern.search(text)
        value = match.group(1).strip() if match else ""
        fields[name] = value

    return ImageAnalysis(
        title=fields["title"] or DEFAULT_TITLE,
        incident_type=fields["incident_type"] or DEFAULT_INCIDENT_TYPE,
        description=fields["description"] or text[:DESCRIPTION_FALLBACK_LENGTH],
    )


def is_model_unavailable(error: Exception) -> bool:
    """True for quota-exceeded and model-not-found failures"""
    if isinstance(error, (google_exceptions.ResourceExhausted, google_exceptions.NotFound)):
        return True
    message = str(error).lower()
    return any(marker in message for marker in _UNAVAILABLE_MARKERS)


class ImageAnalysisService:
    """Service for captioning report images with Gemini"""

    def __init__(self, api_key: Optional[str], model_name: str, model: Any = None):
        self.model_name = model_name
        self.model = model

        if self.model is None and api_key:
            genai.configure(api_key=api_key)
            self.model = genai.GenerativeModel(model_name)
            logger.info(f"Gemini model configured: {model_name}")

    @property
    def configured(self) -> bool:
        return self.model is not None

    def analyze(self, data_url: Optional[str]) -> ImageAnalysis:
        """
        Analyze a report photo.

        Args:
            data_url: Image as a base64 data URL

        Returns:
            ImageAnalysis; ``degraded`` is set when the model was unavailable
            and the fixed fallback was returned instead

        Raises:
            ValidationError: no image given
            InvalidInputError: image is not a decodable data URL
            ConfigurationError: no Gemini API key
            ServiceError: any other model failure
        """
        if not self.configured:
            logger.error("Gemini API Key is missing")
            raise ConfigurationError("Server configuration error: Missing AI API Key")

        if not data_url:
            raise ValidationError("No image data provided")

        mime_type, image_data = parse_data_url(data_url)
        logger.info(f"Analyzing image: mime_type={mime_type}, size={len(image_data)} bytes")

        try:
            image = Image.open(io.BytesIO(image_data))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.warning(f"Image could not be decoded: {e}")
            raise InvalidInputError("Image data could not be decoded")

        try:
            response = self.model.generate_content([ANALYSIS_PROMPT, image])
            text = response.text
        except Exception as e:
            if is_model_unavailable(e):
                logger.warning(f"AI quota exceeded or model not found, returning fallback analysis: {e}")
                return ImageAnalysis(**FALLBACK_ANALYSIS, degraded=True, reason=str(e))

            logger.error(f"Error in image analysis: {e}")
            raise ServiceError(f"AI Service Error: {e}")

        analysis = parse_analysis_text(text)
        logger.info(f"Image analysis result: title='{analysis.title}', type='{analysis.incident_type}'")
        return analysis
