from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query
from fastapi.responses import JSONResponse
from typing import Dict, Any, Optional
import logging

from app.core.exceptions import AppException
from app.models.report import ReportCreateResponse, ReportStatusUpdate
from app.services.report_service import ReportService
from app.services.notification_service import NotificationService
from app.api.dependencies import get_notification_service, get_report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("/create", response_model=Dict[str, Any])
async def create_report(
    body: Optional[Dict[str, Any]] = Body(None),
    report_service: ReportService = Depends(get_report_service)
):
    """Submit a new report; the body is validated by the report service"""
    logger.info("Received report submission request")
    try:
        report = await report_service.create(body)
    except AppException as e:
        logger.error(f"Error creating report: {e}")
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": e.message}
        )
    except Exception as e:
        logger.exception(f"Unexpected error creating report: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": f"Failed to submit report: {e}"}
        )

    return ReportCreateResponse(
        success=True,
        report_id=report.report_id,
        message="Report submitted successfully"
    ).model_dump(by_alias=True)


@router.patch("/update", response_model=Dict[str, Any])
async def update_report_status(
    background_tasks: BackgroundTasks,
    body: Optional[ReportStatusUpdate] = None,
    report_id: Optional[str] = Query(None, alias="reportId"),
    report_service: ReportService = Depends(get_report_service),
    notification_service: NotificationService = Depends(get_notification_service)
):
    """Change a report's status and email the reporter if they asked for updates"""
    try:
        report = await report_service.update_status(report_id, body.status if body else None)
    except AppException as e:
        logger.error(f"Error updating report: {e}")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    except Exception as e:
        logger.exception(f"Unexpected error updating report: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to update report"})

    # Runs after the response; the status change is already committed
    if notification_service.should_notify(report):
        background_tasks.add_task(notification_service.notify, report)

    return report.to_response()


@router.get("", response_model=Dict[str, Any])
async def list_reports(
    status: Optional[str] = None,
    report_type: Optional[str] = Query(None, alias="reportType"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    report_service: ReportService = Depends(get_report_service)
):
    """List reports for the map view, newest first"""
    try:
        reports = await report_service.list_reports(
            status=status,
            report_type=report_type,
            limit=limit,
            offset=offset
        )
    except AppException as e:
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    return {
        "reports": [report.to_response() for report in reports],
        "pagination": {
            "count": len(reports),
            "limit": limit,
            "offset": offset
        }
    }


@router.get("/{report_id}", response_model=Dict[str, Any])
async def get_report(
    report_id: str,
    report_service: ReportService = Depends(get_report_service)
):
    """Get a single report by its reportId"""
    try:
        report = await report_service.get(report_id)
    except AppException as e:
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    return report.to_response()
