from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.transport.transport_controller import TransportController
from api.transport.transport_schema import (
    RouteRead,
    TripFootprint,
    VehicleEmissionsRead,
    VehicleMakeRead,
    VehicleModelRead,
)
from config.points_config import TransportMode
from middlewares.auth_middleware import auth_middleware
from utils.deps import get_route_provider, get_vehicle_provider

router = APIRouter(prefix="/transport", tags=["Transport"])


@router.get("/route", response_model=RouteRead, summary="Distance and duration between two places")
def get_route(
    origin: str = Query(..., min_length=1),
    destination: str = Query(..., min_length=1),
    mode: TransportMode = Query(TransportMode.car),
    provider=Depends(get_route_provider),
    current_user=Depends(auth_middleware)
):
    return TransportController.route(origin, destination, mode, provider)


@router.get("/vehicles/makes", response_model=List[VehicleMakeRead])
def list_makes(
    search: Optional[str] = Query(None, description="Case-insensitive substring of the make name"),
    provider=Depends(get_vehicle_provider),
    current_user=Depends(auth_middleware)
):
    return TransportController.makes(search, provider)


@router.get("/vehicles/makes/{make_id}/models", response_model=List[VehicleModelRead])
def list_models(
    make_id: int,
    provider=Depends(get_vehicle_provider),
    current_user=Depends(auth_middleware)
):
    return TransportController.models(make_id, provider)


@router.get("/vehicles/emissions", response_model=VehicleEmissionsRead, summary="Estimated emission factor")
def vehicle_emissions(
    make: str = Query(..., min_length=1),
    model: str = Query(..., min_length=1),
    year: int = Query(..., ge=1950, le=2100),
    provider=Depends(get_vehicle_provider),
    current_user=Depends(auth_middleware)
):
    return TransportController.emissions(make, model, year, provider)


@router.get("/trip-footprint", response_model=TripFootprint, summary="Score and CO2e estimate for one trip")
def trip_footprint(
    mode: TransportMode = Query(...),
    distance_km: float = Query(..., ge=0),
    make: Optional[str] = Query(None),
    model: Optional[str] = Query(None),
    year: Optional[int] = Query(None, ge=1950, le=2100),
    provider=Depends(get_vehicle_provider),
    current_user=Depends(auth_middleware)
):
    return TransportController.trip_footprint(mode, distance_km, make, model, year, provider)
