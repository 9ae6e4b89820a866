# helpers/vehicle_provider.py
"""
Vehicle makes/models from the NHTSA vPIC API, plus a heuristic CO2
emission factor (kg per km) used to estimate car trip footprints.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

import requests

from helpers.route_provider import ProviderError

logger = logging.getLogger(__name__)

# kg CO2 per km by fuel type
EMISSION_FACTORS = {
    "GASOLINE":      0.120,
    "DIESEL":        0.140,
    "HYBRID":        0.085,
    "ELECTRIC":      0.020,
    "PLUGIN_HYBRID": 0.050,
}

YEAR_ADJUSTMENT = {
    2023: 0.92,
    2022: 0.94,
    2021: 0.96,
    2020: 0.98,
    2019: 1.0,
    2018: 1.03,
    2017: 1.06,
    2016: 1.09,
    2015: 1.12,
    2014: 1.15,
    2013: 1.18,
    2012: 1.21,
}

SIZE_ADJUSTMENT = {
    "Compact":      0.85,
    "Midsize":      1.0,
    "Large":        1.2,
    "SUV":          1.3,
    "Pickup Truck": 1.4,
    "Van":          1.25,
}

# (vehicle class, model name fragments), checked in order
_CLASS_HINTS = (
    ("Compact", ("compact", "fiesta", "civic", "corolla")),
    ("SUV", ("suv", "explorer", "rav4", "cr-v")),
    ("Pickup Truck", ("truck", "pickup", "f-150", "silverado", "ram")),
    ("Van", ("van", "caravan", "sienna")),
    ("Large", ("large", "full-size")),
)


@dataclass
class VehicleMake:
    id: int
    name: str


@dataclass
class VehicleModel:
    id: int
    name: str
    make_id: int


@dataclass
class VehicleEmissions:
    make: str
    model: str
    year: int
    fuel_type: str
    vehicle_class: str
    emission_factor: float


class VehicleDataProvider(Protocol):
    def get_makes(self) -> List[VehicleMake]:
        ...

    def search_makes(self, term: str) -> List[VehicleMake]:
        ...

    def get_models(self, make_id: int) -> List[VehicleModel]:
        ...

    def get_emissions(self, make: str, model: str, year: int) -> VehicleEmissions:
        ...


def determine_fuel_type(model: str, make: str) -> str:
    model, make = model.lower(), make.lower()
    if "electric" in model or "ev" in model.split() or make == "tesla":
        return "ELECTRIC"
    if "hybrid" in model:
        return "PLUGIN_HYBRID" if ("plug" in model or "phev" in model) else "HYBRID"
    if "diesel" in model or "tdi" in model:
        return "DIESEL"
    return "GASOLINE"


def determine_vehicle_class(model: str) -> str:
    model = model.lower()
    for vehicle_class, hints in _CLASS_HINTS:
        if any(h in model for h in hints):
            return vehicle_class
    return "Midsize"


def estimate_emissions(make: str, model: str, year: int) -> VehicleEmissions:
    fuel_type = determine_fuel_type(model, make)
    vehicle_class = determine_vehicle_class(model)
    factor = (
        EMISSION_FACTORS[fuel_type]
        * YEAR_ADJUSTMENT.get(year, 1.0)
        * SIZE_ADJUSTMENT[vehicle_class]
    )
    return VehicleEmissions(
        make=make,
        model=model,
        year=year,
        fuel_type=fuel_type,
        vehicle_class=vehicle_class,
        emission_factor=round(factor, 3),
    )


class NhtsaVehicleProvider:
    def __init__(
        self,
        base_url: str = "https://vpic.nhtsa.dot.gov/api/vehicles",
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._makes: Optional[List[VehicleMake]] = None

    def _get_results(self, path: str) -> List[Dict]:
        url = f"{self.base_url}/{path}"
        try:
            resp = self.session.get(url, params={"format": "json"}, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json().get("Results") or []
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("vehicle data request %s failed: %s", path, e)
            raise ProviderError("Vehicle data lookup failed") from e

    def get_makes(self) -> List[VehicleMake]:
        if self._makes is None:
            results = self._get_results("GetAllMakes")
            try:
                self._makes = [VehicleMake(id=r["Make_ID"], name=r["Make_Name"]) for r in results]
            except (KeyError, TypeError) as e:
                logger.warning("malformed makes response: %r", e)
                raise ProviderError("Vehicle data lookup returned an unexpected response") from e
        return self._makes

    def search_makes(self, term: str) -> List[VehicleMake]:
        term = term.lower()
        return [m for m in self.get_makes() if term in m.name.lower()]

    def get_models(self, make_id: int) -> List[VehicleModel]:
        results = self._get_results(f"GetModelsForMakeId/{make_id}")
        try:
            return [
                VehicleModel(id=r["Model_ID"], name=r["Model_Name"], make_id=r.get("Make_ID", make_id))
                for r in results
            ]
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning("malformed models response for make %s: %r", make_id, e)
            raise ProviderError("Vehicle data lookup returned an unexpected response") from e

    def get_emissions(self, make: str, model: str, year: int) -> VehicleEmissions:
        return estimate_emissions(make, model, year)
