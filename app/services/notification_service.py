"""
Notification dispatch for leave events (fire-and-forget)

Events go to NOTIFY_WEBHOOK_URL as JSON. Delivery runs after the response
via FastAPI BackgroundTasks; a failed delivery is logged and never surfaces to
the submitter or approver, and never affects the recorded application.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.models.leave import LeaveApplication

logger = logging.getLogger(__name__)

EVENT_NEW_REQUEST = "new_request"
EVENT_STATUS_CHANGE = "status_change"


def build_event(event_type: str, application: LeaveApplication) -> Dict[str, Any]:
    """Payload for one leave event; built eagerly so the background task needs no session"""
    status_value = getattr(application.status, "value", application.status)
    return {
        "type": event_type,
        "request_id": application.id,
        "employee_id": application.employee_id,
        "employee_name": application.employee_name,
        "leave_type": application.leave_type,
        "from_date": application.from_date.isoformat(),
        "to_date": application.to_date.isoformat(),
        "status": status_value,
        "decided_by": application.decided_by,
    }


def dispatch_leave_event(event: Dict[str, Any], webhook_url: Optional[str] = None) -> bool:
    """
    POST one event to the webhook.

    Returns:
        True when delivered, False when skipped or failed
    """
    url = webhook_url or settings.NOTIFY_WEBHOOK_URL
    if not url:
        logger.info("notification skipped (no webhook): type=%s request_id=%s", event.get("type"), event.get("request_id"))
        return False

    try:
        with httpx.Client(timeout=settings.NOTIFY_TIMEOUT_SECONDS) as client:
            response = client.post(url, json=event)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(
            "notification failed: type=%s request_id=%s error=%s",
            event.get("type"), event.get("request_id"), e,
        )
        return False

    logger.info("notification sent: type=%s request_id=%s", event.get("type"), event.get("request_id"))
    return True
