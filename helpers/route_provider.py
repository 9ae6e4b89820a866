# helpers/route_provider.py
"""
Route lookups for trip logging.

RouteProvider is the capability the rest of the app depends on;
GoogleDirectionsProvider is the production implementation.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """An external data provider failed or returned something unusable."""


@dataclass
class RouteInfo:
    start_address: str
    end_address: str
    distance_km: float
    duration_minutes: float


class RouteProvider(Protocol):
    def calculate_route(self, origin: str, destination: str, mode: str = "driving") -> RouteInfo:
        ...


# transport modes → Google travel modes
GOOGLE_TRAVEL_MODES = {
    "car": "driving",
    "public": "transit",
    "bike": "bicycling",
    "walk": "walking",
}


class GoogleDirectionsProvider:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://maps.googleapis.com/maps/api/directions/json",
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def calculate_route(self, origin: str, destination: str, mode: str = "driving") -> RouteInfo:
        if not self.api_key:
            raise ProviderError("Google Maps API key is not configured")

        params = {
            "origin": origin,
            "destination": destination,
            "mode": GOOGLE_TRAVEL_MODES.get(mode, mode),
            "key": self.api_key,
        }
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("directions request failed: %s", e)
            raise ProviderError("Route lookup failed") from e

        status = data.get("status")
        if status != "OK" or not data.get("routes"):
            logger.info("directions returned status %s for %r -> %r", status, origin, destination)
            raise ProviderError(f"No route found ({status})")

        try:
            leg = data["routes"][0]["legs"][0]
            return RouteInfo(
                start_address=leg.get("start_address", origin),
                end_address=leg.get("end_address", destination),
                distance_km=leg["distance"]["value"] / 1000,
                duration_minutes=leg["duration"]["value"] / 60,
            )
        except (KeyError, IndexError, TypeError) as e:
            logger.warning("malformed directions response for %r -> %r: %r", origin, destination, e)
            raise ProviderError("Route lookup returned an unexpected response") from e
