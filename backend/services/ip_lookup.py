"""IP geolocation lookups against ipinfo.io."""
import ipaddress
import logging
from typing import Any, Dict, Optional
import httpx

from config import IPINFO_BASE_URL, IPINFO_TOKEN, IP_LOOKUP_TIMEOUT
from services.errors import InvalidInputError, UpstreamError

logger = logging.getLogger(__name__)


class IPLookupClient:
    """Thin client for the ipinfo.io JSON API. Failures are not retried."""

    def __init__(
        self,
        token: Optional[str] = IPINFO_TOKEN,
        base_url: str = IPINFO_BASE_URL,
        timeout: float = IP_LOOKUP_TIMEOUT
    ):
        """
        Initialize the lookup client.

        Args:
            token: ipinfo.io API token (lookups work without one, rate limited)
            base_url: API root
            timeout: Request timeout in seconds
        """
        if not token:
            logger.warning("IPINFO_TOKEN is not set; lookups will be anonymous")

        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        logger.info("Initialized IPLookupClient")

    def lookup(self, ip: str) -> Dict[str, Any]:
        """
        Look up geolocation data for an address.

        Raises:
            InvalidInputError: If `ip` is missing or not an IP address
            UpstreamError: If the upstream request fails
        """
        if not ip or not ip.strip():
            raise InvalidInputError("Missing IP")
        try:
            address = str(ipaddress.ip_address(ip.strip()))
        except ValueError as e:
            raise InvalidInputError("Invalid IP", {"ip": ip}) from e

        return self._get(f"{self.base_url}/{address}/json")

    def lookup_self(self) -> Dict[str, Any]:
        """Look up the address the request originates from."""
        return self._get(f"{self.base_url}/json")

    def _get(self, url: str) -> Dict[str, Any]:
        params = {"token": self.token} if self.token else {}

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(url, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"IP lookup timed out after {self.timeout}s")
            raise UpstreamError("Failed to fetch IP data") from e
        except httpx.RequestError as e:
            logger.error(f"IP lookup network error: {str(e)}")
            raise UpstreamError("Failed to fetch IP data") from e

        if response.status_code != 200:
            logger.error(f"IP lookup failed with status {response.status_code}")
            raise UpstreamError("Failed to fetch IP data", {"status": response.status_code})

        try:
            return response.json()
        except ValueError as e:
            logger.error("IP lookup returned a non-JSON body")
            raise UpstreamError("Failed to fetch IP data") from e
