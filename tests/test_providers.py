"""Tests for the route and vehicle data providers with a mocked HTTP session."""
from unittest.mock import MagicMock

import pytest
import requests

from helpers.route_provider import GoogleDirectionsProvider, ProviderError
from helpers.vehicle_provider import (
    NhtsaVehicleProvider,
    determine_fuel_type,
    determine_vehicle_class,
    estimate_emissions,
)


def _session(payload=None, exc=None):
    session = MagicMock()
    if exc is not None:
        session.get.side_effect = exc
    else:
        resp = MagicMock()
        resp.json.return_value = payload
        resp.raise_for_status.return_value = None
        session.get.return_value = resp
    return session


DIRECTIONS_OK = {
    "status": "OK",
    "routes": [{
        "legs": [{
            "distance": {"value": 12400},
            "duration": {"value": 900},
            "start_address": "1 Main St",
            "end_address": "9 Elm St",
        }],
    }],
}


class TestGoogleDirectionsProvider:
    def test_parses_first_leg(self):
        session = _session(DIRECTIONS_OK)
        provider = GoogleDirectionsProvider("key", base_url="https://maps.test/directions", session=session)
        route = provider.calculate_route("Home", "Office", "bike")
        assert route.distance_km == pytest.approx(12.4)
        assert route.duration_minutes == pytest.approx(15)
        assert route.start_address == "1 Main St"
        _, kwargs = session.get.call_args
        assert kwargs["params"]["mode"] == "bicycling"
        assert kwargs["params"]["key"] == "key"

    def test_requires_api_key(self):
        with pytest.raises(ProviderError):
            GoogleDirectionsProvider(None, session=_session(DIRECTIONS_OK)).calculate_route("a", "b")

    def test_no_route(self):
        provider = GoogleDirectionsProvider("key", session=_session({"status": "ZERO_RESULTS", "routes": []}))
        with pytest.raises(ProviderError, match="ZERO_RESULTS"):
            provider.calculate_route("a", "b")

    def test_network_failure(self):
        provider = GoogleDirectionsProvider("key", session=_session(exc=requests.ConnectionError("boom")))
        with pytest.raises(ProviderError):
            provider.calculate_route("a", "b")

    @pytest.mark.parametrize("routes", [
        [{"legs": []}],
        [{}],
        [{"legs": [{"distance": {"value": 1000}}]}],
        [{"legs": [{"distance": None, "duration": {"value": 60}}]}],
    ])
    def test_malformed_route_is_provider_error(self, routes):
        provider = GoogleDirectionsProvider("key", session=_session({"status": "OK", "routes": routes}))
        with pytest.raises(ProviderError, match="unexpected response"):
            provider.calculate_route("a", "b")


class TestNhtsaVehicleProvider:
    def test_makes_are_fetched_once(self):
        session = _session({"Results": [{"Make_ID": 441, "Make_Name": "TESLA"}, {"Make_ID": 448, "Make_Name": "TOYOTA"}]})
        provider = NhtsaVehicleProvider("https://vpic.test/api/vehicles/", session=session)
        assert [m.name for m in provider.get_makes()] == ["TESLA", "TOYOTA"]
        assert [m.id for m in provider.search_makes("toy")] == [448]
        assert session.get.call_count == 1
        args, _ = session.get.call_args
        assert args[0] == "https://vpic.test/api/vehicles/GetAllMakes"

    def test_models(self):
        session = _session({"Results": [{"Model_ID": 2208, "Model_Name": "Prius", "Make_ID": 448}]})
        models = NhtsaVehicleProvider(session=session).get_models(448)
        assert models[0].name == "Prius"
        assert models[0].make_id == 448

    def test_failure_becomes_provider_error(self):
        provider = NhtsaVehicleProvider(session=_session(exc=requests.Timeout("slow")))
        with pytest.raises(ProviderError):
            provider.get_makes()

    def test_malformed_results_become_provider_error(self):
        provider = NhtsaVehicleProvider(session=_session({"Results": [{"Make_ID": 441}]}))
        with pytest.raises(ProviderError, match="unexpected response"):
            provider.get_makes()
        provider = NhtsaVehicleProvider(session=_session({"Results": [{"Model_Name": "Prius"}]}))
        with pytest.raises(ProviderError, match="unexpected response"):
            provider.get_models(448)


class TestEmissionEstimate:
    @pytest.mark.parametrize(
        "make,model,expected",
        [
            ("Tesla", "Model 3", "ELECTRIC"),
            ("Chevrolet", "Bolt EV", "ELECTRIC"),
            ("Cadillac", "Seville", "GASOLINE"),
            ("Toyota", "Prius Hybrid", "HYBRID"),
            ("Toyota", "Prius Plug-in Hybrid", "PLUGIN_HYBRID"),
            ("Volkswagen", "Golf TDI", "DIESEL"),
        ],
    )
    def test_fuel_type(self, make, model, expected):
        assert determine_fuel_type(model, make) == expected

    def test_vehicle_class(self):
        assert determine_vehicle_class("Corolla") == "Compact"
        assert determine_vehicle_class("F-150") == "Pickup Truck"
        assert determine_vehicle_class("Camry") == "Midsize"

    def test_estimate(self):
        emissions = estimate_emissions("Toyota", "Corolla", 2019)
        assert emissions.fuel_type == "GASOLINE"
        assert emissions.emission_factor == pytest.approx(0.102)

    def test_unknown_year_uses_no_adjustment(self):
        assert estimate_emissions("Ford", "Taurus", 1999).emission_factor == pytest.approx(0.12)
