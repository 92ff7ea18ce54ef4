"""HTTP client for the Riftbound event locator API."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict

import requests

from processor.exceptions import NetworkError, SchemaValidationError

logger = logging.getLogger(__name__)


class EventLocatorClient:
    """Client fetching a single page of upcoming events near a point."""

    BASE_URL = "https://api.cloudflare.riftbound.uvsgames.com/hydraproxy/api/v2/events/"

    def __init__(
        self,
        latitude: float = 48.8571346,
        longitude: float = 2.3479679,
        radius_miles: int = 8,
        game_slug: str = 'riftbound',
        page_size: int = 200,
        timeout: int = 30,
        verify_tls: bool = True
    ):
        """
        Initialize the locator client.

        Args:
            latitude: Latitude of the search center
            longitude: Longitude of the search center
            radius_miles: Search radius around the center
            game_slug: Game identifier understood by the API
            page_size: Number of results requested in the single page
            timeout: HTTP request timeout in seconds (default: 30)
            verify_tls: Verify the server certificate (default: True)
        """
        self.latitude = latitude
        self.longitude = longitude
        self.radius_miles = radius_miles
        self.game_slug = game_slug
        self.page_size = page_size
        self.timeout = timeout
        self.verify_tls = verify_tls

        if not verify_tls:
            logger.warning(
                "TLS certificate verification is DISABLED for the event "
                "locator request"
            )

    def build_params(self, now: datetime) -> Dict[str, Any]:
        """
        Build query parameters for the listing request.

        Args:
            now: Time of the current run, used as the start-date lower bound

        Returns:
            Dict of query parameters
        """
        return {
            'start_date_after': format_instant(now),
            'display_status': 'upcoming',
            'latitude': self.latitude,
            'longitude': self.longitude,
            'num_miles': self.radius_miles,
            'upcoming_only': 'true',
            'game_slug': self.game_slug,
            'page': 1,
            'page_size': self.page_size
        }

    def fetch_events(self, now: datetime) -> Any:
        """
        Fetch the first page of upcoming events.

        Args:
            now: Time of the current run

        Returns:
            Decoded JSON body

        Raises:
            NetworkError: If the request fails or returns an error status
            SchemaValidationError: If the body is not valid JSON
        """
        params = self.build_params(now)
        logger.info(
            f"Fetching events within {self.radius_miles} miles of "
            f"({self.latitude}, {self.longitude})"
        )

        try:
            response = requests.get(
                self.BASE_URL,
                params=params,
                timeout=self.timeout,
                verify=self.verify_tls
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Event locator request failed: {e}")
            raise NetworkError(f"Event locator request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise SchemaValidationError(
                path='<root>',
                expectation=f"body is not valid JSON ({e})"
            ) from e

        logger.info(f"Received response ({len(response.content)} bytes)")
        return body


def format_instant(value: datetime) -> str:
    """Format a datetime as a UTC ISO 8601 instant with milliseconds."""
    if value.tzinfo is None:
        value = value.astimezone()
    utc = value.astimezone(timezone.utc)
    return utc.strftime('%Y-%m-%dT%H:%M:%S.') + f"{utc.microsecond // 1000:03d}Z"
