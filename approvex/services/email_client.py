import html
import logging
from typing import Any, Dict, Optional

import requests

from approvex.core.config import settings
from approvex.core.exceptions import IntegrationError
from approvex.services.http_retry import retry_transient

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"

REQUEST_TYPE_LABELS = {
    "leave": "Leave Request",
    "expense": "Expense Claim",
    "asset": "Asset Request",
}


def _detail_lines(details: Dict[str, Any]) -> list:
    lines = []
    if details.get("title"):
        lines.append(f"Title: {details['title']}")
    if details.get("amount") is not None:
        lines.append(f"Amount: ${float(details['amount']):.2f}")
    if details.get("start_date") and details.get("end_date"):
        lines.append(f"Period: {details['start_date']} to {details['end_date']}")
    if details.get("days"):
        lines.append(f"Days: {details['days']}")
    if details.get("category"):
        lines.append(f"Category: {details['category']}")
    return lines


@retry_transient
def _post_email(payload: Dict[str, Any]) -> Dict[str, Any]:
    response = requests.post(
        RESEND_URL,
        json=payload,
        headers={
            "Authorization": f"Bearer {settings.email.resend_api_key}",
            "Content-Type": "application/json",
        },
        timeout=settings.integrations.timeout_seconds,
    )
    response.raise_for_status()
    return response.json()


def send_approval_email(
    recipient_email: str,
    recipient_name: str,
    request_type: str,
    request_id: int,
    status: str,
    manager_email: str,
    manager_comment: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Send the decision email for a request and return the provider message id.

    Raises:
        IntegrationError: If the provider is not configured or keeps failing.
    """
    if not settings.email.resend_api_key:
        raise IntegrationError("RESEND_API_KEY is not configured. Set it in the environment.")

    label = REQUEST_TYPE_LABELS.get(request_type, "Request")
    status_label = "Approved" if status == "approved" else "Rejected"
    body = [
        f"Hi {recipient_name},",
        f"Your {label} #{request_id} has been {status_label.lower()} by {manager_email}.",
        *_detail_lines(details or {}),
    ]
    if manager_comment:
        body.append(f"Manager comment: {manager_comment}")

    payload = {
        "from": settings.email.sender,
        "to": [recipient_email],
        "subject": f"{label} {status_label}",
        "html": "".join(f"<p>{html.escape(line)}</p>" for line in body),
    }

    try:
        result = _post_email(payload)
    except requests.exceptions.RequestException as e:
        logger.error(f"Email delivery failed for {label} #{request_id}: {e}")
        raise IntegrationError(f"Email provider error: {e}") from e

    logger.info(f"Approval email sent to {recipient_email} for {label} #{request_id}")
    return result.get("id", "")
