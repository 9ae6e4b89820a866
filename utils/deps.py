# utils/deps.py
"""
Dependency providers. Each shared component is built once per process and
handed to routes through Depends(); tests swap them with
app.dependency_overrides.
"""
from functools import lru_cache
from typing import Callable, Optional
from datetime import datetime

from fastapi import HTTPException, Request
from pydantic import ValidationError

from config.settings import settings
from helpers.route_provider import GoogleDirectionsProvider, RouteProvider
from helpers.vehicle_provider import NhtsaVehicleProvider, VehicleDataProvider
from utils.cache_utils import CacheManager, build_cache_manager, build_rate_limiter
from utils.clock import utcnow
from .query_params import QueryParams


@lru_cache()
def get_cache() -> CacheManager:
    return build_cache_manager(settings.REDIS_URL, settings.CACHE_DEFAULT_TTL)


@lru_cache()
def get_rate_limiter():
    return build_rate_limiter(settings.REDIS_URL, settings.SUBMISSION_RATE_LIMIT, settings.SUBMISSION_RATE_WINDOW)


def get_clock() -> Callable[[], datetime]:
    return utcnow


@lru_cache()
def get_route_provider() -> RouteProvider:
    return GoogleDirectionsProvider(
        settings.GOOGLE_MAPS_API_KEY,
        base_url=settings.GOOGLE_DIRECTIONS_URL,
        timeout=settings.PROVIDER_TIMEOUT,
    )


@lru_cache()
def get_vehicle_provider() -> VehicleDataProvider:
    return NhtsaVehicleProvider(settings.NHTSA_API_URL, timeout=settings.PROVIDER_TIMEOUT)


async def optional_pagination(request: Request) -> Optional[QueryParams]:
    """
    Return QueryParams if any pagination keys are present in the query string,
    otherwise return None.
    """
    qp = request.query_params
    if any(k in qp for k in ("limit", "offset")):  # require at least limit/offset
        try:
            return QueryParams(**qp)
        except ValidationError as e:
            error_messages = ", ".join([f"{err['loc'][0]}: {err['msg']}" for err in e.errors()])
            raise HTTPException(status_code=422, detail=f"Validation Error: {error_messages}")
    return None
