"""Tests for the lenient current-conditions parser."""

import copy

import pytest

from kiwi.ingest.current_parser import parse_current_conditions
from kiwi.ingest.errors import MalformedResponse, NotFound


class TestParseCurrentConditions:
    def test_well_formed_payload(self, current_payload: dict):
        c = parse_current_conditions(current_payload)
        assert c.location == "Auckland"
        assert c.temperature == 17.42
        assert c.feels_like == 17.31
        assert c.humidity == 82
        assert c.pressure == 1012
        assert c.wind_speed == 5.66
        assert c.condition == "Rain"
        assert c.latitude == -36.8485
        assert c.longitude == 174.7633

    def test_synthetic_payload_reproduces_scalars(self):
        payload = {
            "cod": 200,
            "name": "Wellington",
            "main": {"temp": -3.5, "feels_like": -8.25, "humidity": 41, "pressure": 998},
            "wind": {"speed": 12.75},
            "weather": [{"main": "Snow"}, {"main": "Mist"}],
        }
        c = parse_current_conditions(payload)
        assert (c.temperature, c.feels_like, c.humidity, c.pressure, c.wind_speed, c.condition) == (
            -3.5, -8.25, 41, 998, 12.75, "Snow",
        )
        assert c.latitude is None
        assert c.longitude is None

    def test_not_found_carries_server_message(self):
        with pytest.raises(NotFound) as exc_info:
            parse_current_conditions({"cod": "404", "message": "city not found"})
        assert exc_info.value.server_message == "city not found"
        assert exc_info.value.code == "404"
        assert exc_info.value.message == "Error: city not found"

    def test_not_found_fallback_message(self):
        with pytest.raises(NotFound) as exc_info:
            parse_current_conditions(
                {"cod": "400"}, not_found_message="Location not found"
            )
        assert exc_info.value.message == "Error: Location not found"

    def test_integer_non_200_cod(self):
        with pytest.raises(NotFound):
            parse_current_conditions({"cod": 401, "message": "Invalid API key"})

    def test_missing_wind_is_malformed(self, current_payload: dict):
        payload = copy.deepcopy(current_payload)
        del payload["wind"]
        with pytest.raises(MalformedResponse, match="Could not parse weather data"):
            parse_current_conditions(payload)

    def test_missing_main_is_malformed(self, current_payload: dict):
        payload = copy.deepcopy(current_payload)
        del payload["main"]
        with pytest.raises(MalformedResponse):
            parse_current_conditions(payload)

    def test_empty_weather_list_is_malformed(self, current_payload: dict):
        payload = copy.deepcopy(current_payload)
        payload["weather"] = []
        with pytest.raises(MalformedResponse):
            parse_current_conditions(payload)

    def test_non_object_body(self):
        with pytest.raises(MalformedResponse, match="Invalid response format"):
            parse_current_conditions(["not", "an", "object"])

    def test_missing_humidity_defaults_to_zero(self, current_payload: dict):
        payload = copy.deepcopy(current_payload)
        del payload["main"]["humidity"]
        c = parse_current_conditions(payload)
        assert c.humidity == 0
        assert c.pressure == 1012

    def test_missing_leaves_use_fallbacks(self):
        payload = {"main": {}, "wind": {}, "weather": [{}]}
        c = parse_current_conditions(payload)
        assert c.location == "Unknown"
        assert c.temperature == 0.0
        assert c.feels_like == 0.0
        assert c.humidity == 0
        assert c.pressure == 0
        assert c.wind_speed == 0.0
        assert c.condition == "Unknown"

    def test_coordinate_lookup_location_fallback(self):
        payload = {"main": {}, "wind": {}, "weather": [{}]}
        c = parse_current_conditions(payload, default_location="Current Location")
        assert c.location == "Current Location"

    def test_mistyped_leaf_falls_back(self):
        payload = {
            "main": {"temp": "warm", "humidity": 55.5, "pressure": 1009.0},
            "wind": {"speed": True},
            "weather": [{"main": 7}],
        }
        c = parse_current_conditions(payload)
        assert c.temperature == 0.0
        assert c.humidity == 0
        assert c.pressure == 1009
        assert c.wind_speed == 0.0
        assert c.condition == "Unknown"

    def test_integer_temperature_accepted(self):
        payload = {"main": {"temp": 21}, "wind": {"speed": 3}, "weather": [{"main": "Clear"}]}
        c = parse_current_conditions(payload)
        assert c.temperature == 21.0
        assert isinstance(c.temperature, float)
