# Controller
from dataclasses import asdict
from typing import List, Optional

from fastapi import HTTPException, status

from api.transport.transport_schema import (
    RouteRead,
    TripFootprint,
    VehicleEmissionsRead,
    VehicleMakeRead,
    VehicleModelRead,
)
from config.points_config import TransportMode
from helpers.route_provider import ProviderError, RouteProvider
from helpers.vehicle_provider import VehicleDataProvider
from scoring.formatting import format_carbon_footprint, format_distance, format_duration
from scoring.payloads import Trip
from scoring.rules import carbon_trip_footprint, trip_score


def _bad_gateway(e: ProviderError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


class TransportController:
    @staticmethod
    def route(origin: str, destination: str, mode: TransportMode, provider: RouteProvider) -> RouteRead:
        try:
            info = provider.calculate_route(origin, destination, mode.value)
        except ProviderError as e:
            raise _bad_gateway(e)
        return RouteRead(
            **asdict(info),
            formatted_distance=format_distance(info.distance_km),
            formatted_duration=format_duration(info.duration_minutes),
        )

    @staticmethod
    def makes(search: Optional[str], provider: VehicleDataProvider) -> List[VehicleMakeRead]:
        try:
            makes = provider.search_makes(search) if search else provider.get_makes()
        except ProviderError as e:
            raise _bad_gateway(e)
        return [VehicleMakeRead(**asdict(m)) for m in makes]

    @staticmethod
    def models(make_id: int, provider: VehicleDataProvider) -> List[VehicleModelRead]:
        try:
            models = provider.get_models(make_id)
        except ProviderError as e:
            raise _bad_gateway(e)
        return [VehicleModelRead(**asdict(m)) for m in models]

    @staticmethod
    def emissions(make: str, model: str, year: int, provider: VehicleDataProvider) -> VehicleEmissionsRead:
        return VehicleEmissionsRead(**asdict(provider.get_emissions(make, model, year)))

    @staticmethod
    def trip_footprint(
        mode: TransportMode,
        distance_km: float,
        make: Optional[str],
        model: Optional[str],
        year: Optional[int],
        provider: VehicleDataProvider,
    ) -> TripFootprint:
        trip = Trip(mode=mode, distance_km=distance_km)
        factor = None
        if mode == TransportMode.car and make and model and year:
            factor = provider.get_emissions(make, model, year).emission_factor
        footprint = carbon_trip_footprint(trip, factor)
        return TripFootprint(
            mode=mode,
            distance_km=distance_km,
            score=trip_score(trip),
            footprint_kg=footprint,
            formatted_footprint=format_carbon_footprint(footprint),
            emission_factor=factor,
        )
