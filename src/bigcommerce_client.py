"""Minimal BigCommerce catalog API client used during product import."""
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Dict, Any, List
import requests

from src import settings
from src.logging_conf import logger


class BigCommerceClient:
    """Reads catalog data from the BigCommerce v3 API."""

    def __init__(self, store_hash: str = None, access_token: str = None):
        store_hash = store_hash or settings.BIGCOMMERCE_STORE_HASH
        self.base_url = f"https://api.bigcommerce.com/stores/{store_hash}/v3"
        self.session = requests.Session()
        self.session.headers.update({
            "X-Auth-Token": access_token or settings.BIGCOMMERCE_ACCESS_TOKEN or "",
            "Accept": "application/json"
        })

    def get_variants(self, product_id: int) -> Optional[List[Dict[str, Any]]]:
        """
        Fetch all variants of a catalog product.

        Args:
            product_id: BigCommerce product ID

        Returns:
            List of variant dicts, or None if the API could not be reached
        """
        variants = []
        page = 1
        while True:
            response = self._request("GET", f"/catalog/products/{product_id}/variants", params={"page": page, "limit": 250})
            if response is None or "data" not in response:
                logger.warning(f"Could not fetch variants for product {product_id}")
                return None

            variants.extend(response["data"])

            pagination = response.get("meta", {}).get("pagination", {})
            if page >= pagination.get("total_pages", 1):
                break
            page += 1

        return variants

    def _request(self, method: str, endpoint: str, params: Dict[str, Any] = None, retry_count: int = 0) -> Optional[Dict[str, Any]]:
        """Make API request with retry logic."""
        url = f"{self.base_url}{endpoint}"

        try:
            response = self.session.request(method=method, url=url, params=params, timeout=30)

            if response.status_code == 429 and retry_count < 3:
                retry_after = self._retry_after(response.headers.get("Retry-After"))
                logger.warning(f"Rate limited. Waiting {retry_after}s...")
                time.sleep(retry_after)
                return self._request(method, endpoint, params, retry_count + 1)

            if response.status_code >= 500 and retry_count < 3:
                wait_time = 2 ** retry_count
                logger.warning(f"Server error {response.status_code}. Retrying in {wait_time}s...")
                time.sleep(wait_time)
                return self._request(method, endpoint, params, retry_count + 1)

            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            if retry_count < 3 and isinstance(e, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
                wait_time = 2 ** retry_count
                time.sleep(wait_time)
                return self._request(method, endpoint, params, retry_count + 1)
            logger.error(f"BigCommerce API request failed: {e}")
            return None

    def _retry_after(self, value: Optional[str], default: int = 60) -> int:
        """Seconds to wait from a Retry-After header given as seconds or an HTTP date."""
        if not value:
            return default
        try:
            return max(0, int(value))
        except ValueError:
            pass
        try:
            retry_at = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return default
        if retry_at.tzinfo is None:
            retry_at = retry_at.replace(tzinfo=timezone.utc)
        return max(0, int((retry_at - datetime.now(timezone.utc)).total_seconds()))
