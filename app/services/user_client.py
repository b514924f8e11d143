# app/services/user_client.py
import requests
from pydantic import ValidationError
from requests import RequestException

from app.domain.errors import GatewayConnectivityError
from app.domain.schemas import UserProfile
from app.utils.retry import http_retry
from app.utils.settings import USER_SERVICE_URL, GATEWAY_TIMEOUT_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class UserClient:
    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or USER_SERVICE_URL).rstrip("/")
        self.timeout = timeout or GATEWAY_TIMEOUT_SECONDS

    @http_retry()
    def _get_user(self, user_id: int) -> requests.Response:
        url = f"{self.base_url}/users/{user_id}"
        logger.info(f"UserClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        if resp.status_code != 404:
            resp.raise_for_status()
        return resp

    def fetch_user(self, user_id: int) -> UserProfile | None:
        try:
            resp = self._get_user(user_id)
        except RequestException as e:
            logger.error(f"UserClient failed for user {user_id}: {e}")
            raise GatewayConnectivityError("user-service", str(e)) from e

        if resp.status_code == 404:
            logger.warning(f"User {user_id} not found in user-service")
            return None
        try:
            return UserProfile.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"UserClient got an unreadable body for user {user_id}: {e}")
            raise GatewayConnectivityError("user-service", f"malformed response: {e}") from e
