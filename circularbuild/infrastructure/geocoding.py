# circularbuild/infrastructure/geocoding.py
import logging
from urllib.parse import quote

import httpx

from circularbuild.domain.entities import Coordinates
from circularbuild.domain.errors import UpstreamError

MAPBOX_GEOCODING_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"


class MapboxGeocoder:
    """Forward geocoding of free-text addresses through the Mapbox places API."""

    def __init__(
        self,
        token: str | None,
        logger: logging.Logger,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.logger = logger
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.token)

    async def geocode(self, query: str | None) -> Coordinates | None:
        query = (query or "").strip()
        if not query or not self.enabled:
            return None

        url = f"{MAPBOX_GEOCODING_URL}/{quote(query, safe='')}.json"
        params = {"access_token": self.token, "limit": "1"}
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(url, params=params)
        except httpx.RequestError as e:
            raise UpstreamError(f"Geocoding request failed: {e!s}") from e

        if resp.status_code != 200:
            raise UpstreamError(f"Geocoding failed with HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError("Geocoding returned an unreadable response") from e

        features = data.get("features") if isinstance(data, dict) else None
        if not features:
            self.logger.debug(f"No geocoding match for '{query}'")
            return None
        if not isinstance(features, list) or not isinstance(features[0], dict):
            raise UpstreamError("Geocoding returned malformed features")
        center = features[0].get("center")
        if not isinstance(center, list) or len(center) < 2:
            return None
        # Mapbox returns [lng, lat]
        try:
            lng, lat = float(center[0]), float(center[1])
        except (TypeError, ValueError) as e:
            raise UpstreamError("Geocoding returned a non-numeric center") from e
        return Coordinates(lat=lat, lng=lng)
