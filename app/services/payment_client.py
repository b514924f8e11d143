# app/services/payment_client.py
import requests
from pydantic import ValidationError
from requests import RequestException

from app.domain.errors import GatewayConnectivityError
from app.domain.schemas import PaymentRequest, PaymentOutcome
from app.utils.retry import http_retry
from app.utils.settings import PAYMENT_SERVICE_URL, GATEWAY_TIMEOUT_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentClient:
    """
    Client for payment-service.

    Charges are not retried: a timeout leaves the remote state unknown, so it is
    surfaced as a connectivity failure. The Idempotency-Key is derived from the
    order id so a manual replay cannot charge twice on a service that honours it.
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or PAYMENT_SERVICE_URL).rstrip("/")
        self.timeout = timeout or GATEWAY_TIMEOUT_SECONDS

    def process_payment(self, request: PaymentRequest) -> PaymentOutcome | None:
        """
        Returns the settlement outcome, or None when payment-service rejected the
        request (any 4xx) or answered without a body.

        Raises:
            GatewayConnectivityError: connection error, timeout or 5xx.
        """
        url = f"{self.base_url}/payments/process"
        headers = {"Idempotency-Key": f"order-{request.order_id}"}
        logger.info(f"PaymentClient POST {url} for order {request.order_id}")

        try:
            resp = requests.post(
                url,
                json=request.model_dump(by_alias=True),
                headers=headers,
                timeout=self.timeout,
            )
        except RequestException as e:
            logger.error(f"[Order: {request.order_id}] Payment service unreachable: {e}")
            raise GatewayConnectivityError("payment-service", str(e)) from e

        if 400 <= resp.status_code < 500:
            logger.warning(
                f"[Order: {request.order_id}] Payment declined (HTTP {resp.status_code}): {resp.text}"
            )
            return None
        if resp.status_code >= 500:
            logger.error(f"[Order: {request.order_id}] Payment service error HTTP {resp.status_code}")
            raise GatewayConnectivityError("payment-service", f"HTTP {resp.status_code}")

        if not resp.content:
            return None
        return self._parse_outcome(resp, request.order_id)

    @http_retry()
    def _get_status(self, order_id: str) -> requests.Response:
        url = f"{self.base_url}/payments/status/order/{order_id}"
        logger.info(f"PaymentClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        if resp.status_code != 404:
            resp.raise_for_status()
        return resp

    def get_payment_status(self, order_id: str) -> PaymentOutcome | None:
        """Latest payment recorded for the order, or None when payment-service has none."""
        try:
            resp = self._get_status(order_id)
        except RequestException as e:
            logger.error(f"[Order: {order_id}] Payment status lookup failed: {e}")
            raise GatewayConnectivityError("payment-service", str(e)) from e

        if resp.status_code == 404 or not resp.content:
            logger.warning(f"[Order: {order_id}] No payment found in payment-service")
            return None
        return self._parse_outcome(resp, order_id)

    @staticmethod
    def _parse_outcome(resp: requests.Response, order_id: str) -> PaymentOutcome:
        try:
            return PaymentOutcome.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"[Order: {order_id}] Unreadable payment-service response: {e}")
            raise GatewayConnectivityError("payment-service", f"malformed response: {e}") from e
