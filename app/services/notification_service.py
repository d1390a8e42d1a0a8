"""
Status update emails.

Sent through the Resend REST API after a report's status changes. Delivery
is best effort: failures are logged and never reach the caller.
"""
import html
import logging
from typing import Any, Dict, Optional

import requests

from app.models.report import Report

logger = logging.getLogger(__name__)


class NotificationService:
    """Sends report status update emails"""

    def __init__(
        self,
        api_key: Optional[str],
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @staticmethod
    def should_notify(report: Report) -> bool:
        """True when the reporter opted in and left an email address"""
        return bool(report.wants_notifications and report.email and report.email.strip())

    def build_status_email(self, report: Report) -> Dict[str, Any]:
        """Subject and bodies for a status update email"""
        report_id = html.escape(report.report_id)
        title = html.escape(report.title)
        status = html.escape(report.status)

        body_html = f"""
<h1>Your Report Status Has Been Updated</h1>
<p>Hello,</p>
<p>We wanted to let you know that the status of your report has been updated.</p>
<p><strong>Report ID:</strong> {report_id}</p>
<p><strong>Title:</strong> {title}</p>
<p><strong>New Status:</strong> {status}</p>
<p>Thank you for using our reporting system.</p>
"""
        body_text = (
            "Your report status has been updated.\n\n"
            f"Report ID: {report.report_id}\n"
            f"Title: {report.title}\n"
            f"New Status: {report.status}\n\n"
            "Thank you for using our reporting system.\n"
        )

        return {
            "from": self.sender,
            "to": [report.email],
            "subject": f"Report Status Update: {report.title}",
            "html": body_html,
            "text": body_text,
        }

    def notify(self, report: Report) -> bool:
        """
        Email the reporter about the report's current status.

        Returns:
            True if the provider accepted the email, False otherwise
        """
        if not self.should_notify(report):
            return False

        if not self.api_key:
            logger.warning("RESEND_API_KEY is missing, skipping email notification.")
            return False

        try:
            response = self.session.post(
                self.api_url,
                json=self.build_status_email(report),
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Error sending email notification for report {report.report_id}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error sending email notification for report {report.report_id}: {e}")
            return False

        logger.info(f"Email notification sent to {report.email}")
        return True
