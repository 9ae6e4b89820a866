from typing import Optional

from pydantic import BaseModel, Field

from config.points_config import TransportMode


class RouteRead(BaseModel):
    start_address: str
    end_address: str
    distance_km: float
    duration_minutes: float
    formatted_distance: str
    formatted_duration: str


class VehicleMakeRead(BaseModel):
    id: int
    name: str


class VehicleModelRead(BaseModel):
    id: int
    name: str
    make_id: int


class VehicleEmissionsRead(BaseModel):
    make: str
    model: str
    year: int
    fuel_type: str
    vehicle_class: str
    emission_factor: float = Field(..., description="kg CO2e per km")


class TripFootprint(BaseModel):
    mode: TransportMode
    distance_km: float
    score: float
    footprint_kg: float
    formatted_footprint: str
    emission_factor: Optional[float] = None
