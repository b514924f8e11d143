# app/services/notification_client.py
import requests
from requests import RequestException

from app.domain.errors import NotificationError
from app.domain.schemas import NotificationRequest
from app.utils.settings import NOTIFICATION_SERVICE_URL, GATEWAY_TIMEOUT_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationClient:
    """Client for notification-service. Sending is best effort for every caller."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or NOTIFICATION_SERVICE_URL).rstrip("/")
        self.timeout = timeout or GATEWAY_TIMEOUT_SECONDS

    def send_email(self, request: NotificationRequest) -> bool:
        """
        True when the service accepted the message, False when it rejected it (4xx).

        Raises:
            NotificationError: connection error, timeout or 5xx.
        """
        url = f"{self.base_url}/notifications/email"

        try:
            resp = requests.post(url, json=request.model_dump(by_alias=True), timeout=self.timeout)
        except RequestException as e:
            raise NotificationError(str(e)) from e

        if 400 <= resp.status_code < 500:
            logger.warning(
                f"Notification service rejected email to {request.recipient_email}: "
                f"HTTP {resp.status_code} {resp.text}"
            )
            return False
        if resp.status_code >= 500:
            raise NotificationError(f"HTTP {resp.status_code}")

        logger.info(f"Email notification ({request.kind}) sent to {request.recipient_email}")
        return True
