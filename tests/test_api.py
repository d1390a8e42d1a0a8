"""
Tests for API endpoints
"""
import pytest
import requests
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from main import app
from app.api.dependencies import (
    get_geocoding_service,
    get_image_analysis_service,
    get_notification_service,
    get_report_service,
)
from app.services.ai_service import ImageAnalysisService
from app.services.geocoding_service import GeocodingService
from app.services.image_service import ImageStorageService
from app.services.notification_service import NotificationService
from app.services.report_service import ReportService


@pytest.fixture
def model():
    model = MagicMock()
    model.generate_content.return_value = MagicMock(
        text="TITLE: Burning car\nTYPE: Fire Outbreak\nDESCRIPTION: A car is on fire"
    )
    return model


@pytest.fixture
def geocoder():
    geocoder = MagicMock()
    geocoder.reverse.return_value = MagicMock(address="1 Main Street, Springfield")
    return geocoder


@pytest.fixture
def email_session():
    session = MagicMock()
    session.post.return_value = MagicMock(status_code=200)
    return session


@pytest.fixture
def report_service(fake_supabase, fake_cache):
    return ReportService(
        client=fake_supabase,
        image_service=ImageStorageService(client=fake_supabase, bucket_name="report_images"),
        cache=fake_cache,
    )


@pytest.fixture
def notification_service(email_session):
    return NotificationService(api_key="re_test_key", sender="ReportNow <onboarding@resend.dev>", session=email_session)


@pytest.fixture
def client(model, geocoder, report_service, notification_service):
    app.dependency_overrides[get_image_analysis_service] = lambda: ImageAnalysisService(
        api_key=None, model_name="test-model", model=model
    )
    app.dependency_overrides[get_geocoding_service] = lambda: GeocodingService(geocoder=geocoder)
    app.dependency_overrides[get_report_service] = lambda: report_service
    app.dependency_overrides[get_notification_service] = lambda: notification_service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAnalyzeImage:
    """Test suite for POST /api/analyze-image."""

    def test_success(self, client, png_data_url):
        response = client.post("/api/analyze-image", json={"image": png_data_url})

        assert response.status_code == 200
        assert response.json() == {
            "title": "Burning car",
            "incidentType": "Fire Outbreak",
            "description": "A car is on fire",
        }

    def test_malformed_image(self, client, model):
        response = client.post("/api/analyze-image", json={"image": "not-a-data-url"})

        assert response.status_code == 400
        assert "error" in response.json()
        model.generate_content.assert_not_called()

    def test_missing_image(self, client):
        response = client.post("/api/analyze-image", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "No image data provided"}

    def test_quota_fallback_is_flagged(self, client, model, png_data_url):
        model.generate_content.side_effect = RuntimeError("429 Quota exceeded")

        response = client.post("/api/analyze-image", json={"image": png_data_url})

        body = response.json()
        assert response.status_code == 200
        assert body["title"] == "Emergency Incident"
        assert body["degraded"] is True

    def test_service_error(self, client, model, png_data_url):
        model.generate_content.side_effect = RuntimeError("internal")

        response = client.post("/api/analyze-image", json={"image": png_data_url})

        assert response.status_code == 500
        assert response.json()["error"].startswith("AI Service Error:")


class TestGetCurrentLocation:
    """Test suite for POST /api/get-current-location."""

    def test_success(self, client):
        response = client.post("/api/get-current-location", json={"latitude": 39.78, "longitude": -89.65})

        assert response.status_code == 200
        assert response.json() == {"address": "1 Main Street, Springfield"}

    def test_missing_coordinates(self, client, geocoder):
        response = client.post("/api/get-current-location", json={"latitude": 39.78})

        assert response.status_code == 400
        assert response.json() == {"error": "Latitude and longitude are required"}
        geocoder.reverse.assert_not_called()

    @pytest.mark.parametrize("coordinates", [
        {"latitude": 200, "longitude": 10},
        {"latitude": 10, "longitude": -181},
    ])
    def test_out_of_range_coordinates(self, client, geocoder, coordinates):
        response = client.post("/api/get-current-location", json=coordinates)

        assert response.status_code == 400
        assert "error" in response.json()
        geocoder.reverse.assert_not_called()


class TestCreateReport:
    """Test suite for POST /api/reports/create."""

    def test_success(self, client, report_payload):
        response = client.post("/api/reports/create", json=report_payload)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "reportId": "a1b2c3d4e5f60718",
            "message": "Report submitted successfully",
        }

    def test_missing_fields(self, client, report_payload):
        del report_payload["title"]

        response = client.post("/api/reports/create", json=report_payload)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "title" in body["error"]

    def test_same_payload_without_email_rejected(self, client, report_service, report_payload):
        first = client.post("/api/reports/create", json=report_payload)
        second_payload = {**report_payload, "reportId": "b1b2c3d4e5f60718"}
        del second_payload["email"]

        second = client.post("/api/reports/create", json=second_payload)

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["success"] is False
        assert "Email is required" in second.json()["error"]
        assert [r["report_id"] for r in report_service.client.table("reports").rows] == ["a1b2c3d4e5f60718"]

    def test_invalid_report_type(self, client, report_payload):
        report_payload["reportType"] = "URGENT"

        response = client.post("/api/reports/create", json=report_payload)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "reportType" in response.json()["error"]

    def test_non_object_body(self, client):
        response = client.post("/api/reports/create", json=["not", "an", "object"])

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "error" in response.json()

    def test_storage_unavailable(self, client, report_payload):
        app.dependency_overrides[get_report_service] = lambda: ReportService(client=None)

        response = client.post("/api/reports/create", json=report_payload)

        assert response.status_code == 503
        assert response.json() == {"success": False, "error": "Report storage unavailable"}


class TestUpdateReport:
    """Test suite for PATCH /api/reports/update."""

    def test_update_notifies_opted_in_reporter(self, client, email_session, report_payload):
        client.post("/api/reports/create", json=report_payload)

        response = client.patch("/api/reports/update", params={"reportId": "a1b2c3d4e5f60718"}, json={"status": "RESOLVED"})

        assert response.status_code == 200
        body = response.json()
        assert body["reportId"] == "a1b2c3d4e5f60718"
        assert body["status"] == "RESOLVED"
        assert body["title"] == "Fire"
        email_session.post.assert_called_once()
        assert email_session.post.call_args.kwargs["json"]["to"] == ["a@b.com"]

    def test_no_notification_without_opt_in(self, client, email_session, report_payload):
        report_payload.update(wantsNotifications=False)
        client.post("/api/reports/create", json=report_payload)

        response = client.patch("/api/reports/update", params={"reportId": "a1b2c3d4e5f60718"}, json={"status": "RESOLVED"})

        assert response.status_code == 200
        email_session.post.assert_not_called()

    def test_email_failure_does_not_fail_update(self, client, email_session, report_payload):
        email_session.post.side_effect = requests.ConnectionError("smtp down")
        client.post("/api/reports/create", json=report_payload)

        response = client.patch("/api/reports/update", params={"reportId": "a1b2c3d4e5f60718"}, json={"status": "IN_PROGRESS"})

        assert response.status_code == 200
        assert response.json()["status"] == "IN_PROGRESS"

    def test_missing_report_id(self, client):
        response = client.patch("/api/reports/update", json={"status": "RESOLVED"})

        assert response.status_code == 400
        assert response.json() == {"error": "Report ID is required as a query parameter"}

    def test_missing_status(self, client):
        response = client.patch("/api/reports/update", params={"reportId": "x"}, json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Status is required in the request body"}

    def test_unknown_report(self, client):
        response = client.patch("/api/reports/update", params={"reportId": "nope"}, json={"status": "RESOLVED"})

        assert response.status_code == 404


class TestReadReports:
    """Test suite for report reads."""

    def test_get_report(self, client, report_payload):
        client.post("/api/reports/create", json=report_payload)
        client.patch("/api/reports/update", params={"reportId": "a1b2c3d4e5f60718"}, json={"status": "IN_PROGRESS"})

        response = client.get("/api/reports/a1b2c3d4e5f60718")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "IN_PROGRESS"
        assert body["reportType"] == "EMERGENCY"
        assert body["incidentType"] == "Fire Outbreak"
        assert body["wantsNotifications"] is True

    def test_get_unknown_report(self, client):
        response = client.get("/api/reports/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Report not found"}

    def test_list_reports(self, client, report_payload):
        client.post("/api/reports/create", json=report_payload)
        client.post("/api/reports/create", json={**report_payload, "reportId": "r2", "reportType": "NON_EMERGENCY"})

        response = client.get("/api/reports", params={"reportType": "NON_EMERGENCY"})

        body = response.json()
        assert response.status_code == 200
        assert [r["reportId"] for r in body["reports"]] == ["r2"]
        assert body["pagination"]["count"] == 1


class TestServiceEndpoints:
    """Test suite for root and health endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.json()["status"] == "running"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_incident_types(self, client):
        response = client.get("/api/incident-types")
        assert response.status_code == 200
        assert "Fire Outbreak" in response.json()
        assert "Other" in response.json()
