"""
Geocoding Client

Resolves a free-text address to coordinates through an OpenStreetMap
Nominatim compatible search endpoint. Geocoding is best effort: it only
gates the optional text generation, so callers that cannot afford an
exception use `geocode_or_none`.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .config import Config

LOGGER = logging.getLogger(__name__)


class GeocodingError(Exception):
    """Custom exception for geocoding failures"""
    def __init__(self, message: str, status_code: int = None, response: dict = None):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.message)


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude pair"""
    lat: float
    lon: float

    def to_dict(self):
        return {'lat': self.lat, 'lon': self.lon}


class GeocodingClient:
    """
    Address -> coordinates lookup

    Nominatim requires an identifying User-Agent, so every request goes
    through one session carrying `Config.USER_AGENT`.
    """

    def __init__(self, base_url: str = None, timeout: int = None, session: requests.Session = None):
        """
        Initialize the geocoding client

        Args:
            base_url: Search endpoint (uses env if not provided)
            timeout: Request timeout in seconds (uses env if not provided)
            session: Pre-built requests session (mainly for tests)
        """
        self.base_url = (base_url or Config.GEOCODER_URL).rstrip('/')
        self.timeout = timeout or Config.REQUEST_TIMEOUT

        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': Config.USER_AGENT,
            'Accept-Language': Config.LANGUAGE,
        })

    def geocode(self, address: str) -> Optional[Coordinates]:
        """
        Look up an address

        Args:
            address: Free-text address, e.g. "Musterstraße 12, 12345 Musterstadt"

        Returns:
            Coordinates of the best match, or None when nothing matched

        Raises:
            GeocodingError: transport failure, HTTP error or malformed payload
        """
        address = (address or '').strip()
        if not address:
            return None

        try:
            response = self.session.get(
                self.base_url,
                params={'format': 'json', 'limit': 1, 'q': address},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GeocodingError(f"Geocoding request failed: {e}") from e

        if not response.ok:
            raise GeocodingError(
                f"Geocoding failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            results = response.json()
        except ValueError as e:
            raise GeocodingError("Geocoding returned invalid JSON", status_code=response.status_code) from e

        if not isinstance(results, list) or not results:
            return None

        best = results[0]
        try:
            return Coordinates(lat=float(best['lat']), lon=float(best['lon']))
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingError("Geocoding result without coordinates", response=best) from e

    def geocode_or_none(self, address: str) -> Optional[Coordinates]:
        """Like `geocode`, but logs failures and returns None instead of raising"""
        try:
            return self.geocode(address)
        except GeocodingError as e:
            LOGGER.warning("geocoding unavailable for %r: %s", address, e.message)
            return None
