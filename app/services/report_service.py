from typing import Any, Dict, List, Optional, Union
from datetime import datetime, timezone
import logging

import httpx
from postgrest.exceptions import APIError
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import NotFoundError, UpstreamError, ValidationError
from app.db.redis_client import CacheService
from app.models.report import Report, ReportCreate, ReportStatus
from app.services.image_service import ImageStorageService

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def _first_error_message(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "__root__")
    message = first.get("msg", "Invalid value").removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


class ReportService:
    """Service for report database operations"""

    def __init__(
        self,
        client: Any,
        image_service: Optional[ImageStorageService] = None,
        cache: Optional[CacheService] = None,
        table_name: str = "reports",
    ):
        self.client = client
        self.image_service = image_service
        self.cache = cache or CacheService()
        self.table_name = table_name

    def _table(self):
        if not self.client:
            logger.error("Supabase client not available")
            raise UpstreamError("Report storage unavailable", status_code=503)
        return self.client.table(self.table_name)

    @staticmethod
    def _cache_key(report_id: str) -> str:
        return f"report:{report_id}"

    def _execute(self, query, action: str):
        """Run a query, translating storage failures into application errors"""
        try:
            return query.execute()
        except httpx.TransportError as e:
            logger.error(f"Report storage unreachable while trying to {action}: {e}")
            raise UpstreamError("Report storage unavailable", status_code=503)
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise ValidationError("A report with this reportId already exists", status_code=409)
            logger.error(f"Report storage rejected request to {action}: {e}")
            raise UpstreamError(f"Failed to {action}: {e.message}")

    def _upload_image(self, image: str) -> str:
        """Upload the report photo; an empty URL is returned if that fails"""
        if not self.image_service:
            logger.warning("Image storage not configured, saving report without image")
            return ""
        try:
            image_url = self.image_service.upload_data_url(image)
            logger.info(f"Image uploaded: {image_url}")
            return image_url
        except Exception as e:
            logger.error(f"Error uploading image: {e}")
            return ""

    async def create(self, payload: Union[ReportCreate, Dict[str, Any]]) -> Report:
        """Create a new report"""
        if not isinstance(payload, ReportCreate):
            try:
                payload = ReportCreate.model_validate(payload or {})
            except PydanticValidationError as e:
                raise ValidationError(_first_error_message(e))

        missing = payload.missing_required_fields()
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        table = self._table()

        image_url = ""
        if payload.image:
            image_url = self._upload_image(payload.image)

        now = datetime.now(timezone.utc).isoformat()
        report = Report(
            report_id=payload.report_id,
            report_type=payload.report_type,
            incident_type=payload.incident_type,
            title=payload.title,
            description=payload.description,
            location=payload.location,
            latitude=payload.latitude or 0,
            longitude=payload.longitude or 0,
            image=image_url,
            status=payload.status or ReportStatus.PENDING.value,
            wants_notifications=payload.wants_notifications,
            email=payload.email or "",
        )
        row = report.to_row()
        row["created_at"] = now
        row["updated_at"] = now

        result = self._execute(table.insert(row), "create report")
        if not result.data:
            raise UpstreamError("Failed to create report")

        created = Report(**result.data[0])
        logger.info(f"Report created: {created.report_id}")
        return created

    async def get(self, report_id: str) -> Report:
        """Get report by ID"""
        if not report_id:
            raise ValidationError("Report ID is required")

        cached = await self.cache.get(self._cache_key(report_id))
        if cached:
            return Report(**cached)

        result = self._execute(
            self._table().select("*").eq("report_id", report_id),
            "fetch report",
        )
        if not result.data:
            raise NotFoundError("Report not found")

        report = Report(**result.data[0])
        await self.cache.set(self._cache_key(report_id), report.model_dump(mode="json"))
        return report

    async def list_reports(
        self,
        status: Optional[str] = None,
        report_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[Report]:
        """List reports, newest first"""
        query = self._table().select("*")

        # Apply filters
        if status:
            query = query.eq("status", status)
        if report_type:
            query = query.eq("report_type", report_type)

        # Apply pagination and ordering
        query = query.order("created_at", desc=True).range(offset, offset + limit - 1)

        result = self._execute(query, "list reports")
        return [Report(**row) for row in result.data] if result.data else []

    async def update_status(self, report_id: Optional[str], status: Optional[str]) -> Report:
        """Set a report's status. Any status may replace any other."""
        if not report_id:
            raise ValidationError("Report ID is required as a query parameter")
        if not status or not status.strip():
            raise ValidationError("Status is required in the request body")

        update_dict = {
            "status": status.strip(),
            "updated_at": datetime.now(timezone.utc).isoformat()
        }
        result = self._execute(
            self._table().update(update_dict).eq("report_id", report_id),
            "update report",
        )
        if not result.data:
            raise NotFoundError("Report not found")

        await self.cache.delete(self._cache_key(report_id))

        report = Report(**result.data[0])
        logger.info(f"Report {report_id} status updated to {report.status}")
        return report
