# app/services/product_client.py
import requests
from pydantic import ValidationError
from requests import RequestException

from app.domain.errors import GatewayConnectivityError
from app.domain.schemas import ProductSnapshot
from app.utils.retry import http_retry
from app.utils.settings import PRODUCT_SERVICE_URL, GATEWAY_TIMEOUT_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout or GATEWAY_TIMEOUT_SECONDS

    @http_retry()
    def _get_product(self, product_id: int) -> requests.Response:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        if resp.status_code != 404:
            resp.raise_for_status()
        return resp

    def fetch_product(self, product_id: int) -> ProductSnapshot | None:
        """Returns the current catalog snapshot, or None when the product does not exist."""
        try:
            resp = self._get_product(product_id)
        except RequestException as e:
            logger.error(f"ProductClient failed for product {product_id}: {e}")
            raise GatewayConnectivityError("product-service", str(e)) from e

        if resp.status_code == 404:
            logger.warning(f"Product {product_id} not found in catalog")
            return None
        try:
            return ProductSnapshot.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"ProductClient got an unreadable body for product {product_id}: {e}")
            raise GatewayConnectivityError("product-service", f"malformed response: {e}") from e
