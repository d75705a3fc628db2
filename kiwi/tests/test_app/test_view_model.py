"""Tests for the weather view-model pipeline."""

import asyncio
import logging
import sqlite3
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from kiwi.app.store import WeatherState
from kiwi.app.view_model import WeatherViewModel
from kiwi.ingest.errors import MalformedResponse, NetworkError, NotFound
from kiwi.ingest.owm_client import LocationQuery
from kiwi.ingest.weather_service import WeatherService
from kiwi.models.weather import CurrentConditions, ForecastEntry
from kiwi.notify.scheduler import NotificationScheduler


def _current(location: str = "Auckland", condition: str = "Clouds", temp: float = 18.0):
    return CurrentConditions(
        location=location, temperature=temp, feels_like=temp, humidity=70,
        pressure=1013, wind_speed=4.0, condition=condition,
    )


def _entry(day: int, temp: float = 18.0) -> ForecastEntry:
    return ForecastEntry(
        day=date(2026, 2, day),
        timestamp=datetime(2026, 2, day, tzinfo=UTC),
        temperature=temp, min_temperature=temp - 3, max_temperature=temp + 3,
        condition="Clouds", icon="04d",
    )


def _service(current=None, forecast=None) -> MagicMock:
    service = MagicMock(spec=WeatherService)
    service.fetch_current = AsyncMock(return_value=current or _current())
    service.fetch_forecast = AsyncMock(return_value=forecast or [_entry(11), _entry(12)])
    return service


class TestSearch:
    @pytest.mark.anyio
    async def test_city_pipeline(self):
        service = _service()
        vm = WeatherViewModel(service)
        states: list[WeatherState] = []
        vm.store.subscribe(states.append)

        token = await vm.search_city("  Auckland ")

        assert token is not None
        service.fetch_current.assert_awaited_once_with(LocationQuery.for_city("Auckland"))
        service.fetch_forecast.assert_awaited_once_with(LocationQuery.for_city("Auckland"))
        state = vm.store.state
        assert state.current.location == "Auckland"
        assert [e.day.day for e in state.forecast] == [11, 12]
        assert state.is_loading is False
        assert state.error_message is None
        assert states[0].is_loading is True
        assert states[0].current is None

    @pytest.mark.anyio
    async def test_blank_city_ignored(self):
        service = _service()
        vm = WeatherViewModel(service)
        assert await vm.search_city("   ") is None
        service.fetch_current.assert_not_called()
        assert vm.store.state == WeatherState()

    @pytest.mark.anyio
    async def test_location_pipeline(self):
        service = _service()
        vm = WeatherViewModel(service)
        await vm.search_location(-36.85, 174.76)
        service.fetch_current.assert_awaited_once_with(
            LocationQuery.for_coordinates(-36.85, 174.76)
        )
        assert vm.store.state.current is not None

    @pytest.mark.anyio
    async def test_invalid_location(self):
        service = _service()
        vm = WeatherViewModel(service)
        assert await vm.search_location(123.0, 0.0) is None
        assert vm.store.state.error_message == "Invalid location"
        service.fetch_current.assert_not_called()


class TestErrors:
    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "error",
        [
            NotFound("Error: city not found", "city not found", "404"),
            MalformedResponse("Could not parse weather data"),
            NetworkError("Error: connection refused"),
        ],
    )
    async def test_current_failure_sets_message(self, error):
        service = _service()
        service.fetch_current.side_effect = error
        vm = WeatherViewModel(service)

        await vm.search_city("Atlantis")

        state = vm.store.state
        assert state.error_message == error.message
        assert state.current is None
        assert state.is_loading is False
        service.fetch_forecast.assert_not_called()

    @pytest.mark.anyio
    async def test_error_keeps_previous_forecast(self):
        service = _service()
        vm = WeatherViewModel(service)
        await vm.search_city("Auckland")

        service.fetch_current.side_effect = NotFound("Error: city not found", "city not found", "404")
        await vm.search_city("Atlantis")

        assert vm.store.state.current is None
        assert len(vm.store.state.forecast) == 2

    @pytest.mark.anyio
    async def test_forecast_failure_leaves_forecast_unchanged(self):
        service = _service()
        vm = WeatherViewModel(service)
        await vm.search_city("Auckland")

        service.fetch_current.return_value = _current("Hamilton")
        service.fetch_forecast.side_effect = NetworkError("Error: timeout")
        await vm.search_city("Hamilton")

        state = vm.store.state
        assert state.current.location == "Hamilton"
        assert state.error_message is None
        assert [e.day.day for e in state.forecast] == [11, 12]


class TestAlerts:
    @pytest.fixture
    def scheduler(self, tmp_db: sqlite3.Connection) -> NotificationScheduler:
        s = NotificationScheduler(tmp_db, enabled=True)
        s.request_permission()
        return s

    @pytest.mark.anyio
    async def test_rain_schedules_alert(self, scheduler: NotificationScheduler):
        vm = WeatherViewModel(_service(current=_current(condition="Rain")), scheduler=scheduler)
        await vm.search_city("Auckland")
        (alert,) = scheduler.pending()
        assert alert.title == "Weather Alert"
        assert "umbrella" in alert.body

    @pytest.mark.anyio
    async def test_mild_weather_no_alert(self, scheduler: NotificationScheduler):
        vm = WeatherViewModel(_service(), scheduler=scheduler)
        await vm.search_city("Auckland")
        assert scheduler.pending() == []

    @pytest.mark.anyio
    async def test_alerts_disabled(self, scheduler: NotificationScheduler):
        vm = WeatherViewModel(
            _service(current=_current(temp=35.0)),
            scheduler=scheduler,
            alerts_enabled=False,
        )
        await vm.search_city("Auckland")
        assert scheduler.pending() == []

    @pytest.mark.anyio
    async def test_location_search_also_alerts(self, scheduler: NotificationScheduler):
        vm = WeatherViewModel(_service(current=_current(temp=-5.0)), scheduler=scheduler)
        await vm.search_location(-45.0, 170.0)
        (alert,) = scheduler.pending()
        assert alert.body.startswith("Freezing temperature alert")


class SlowService:
    """Service whose responses are released by the test, per city."""

    def __init__(self):
        self.release: dict[str, asyncio.Event] = {}

    def gate(self, city: str) -> asyncio.Event:
        return self.release.setdefault(city, asyncio.Event())

    async def fetch_current(self, query: LocationQuery) -> CurrentConditions:
        await self.gate(query.city).wait()
        return _current(query.city)

    async def fetch_forecast(self, query: LocationQuery) -> list[ForecastEntry]:
        return [_entry(11, temp=len(query.city))]


class TestConcurrentSearches:
    @pytest.mark.anyio
    async def test_stale_result_applied_by_default(self):
        service = SlowService()
        vm = WeatherViewModel(service)

        vm.submit_city("Auckland")
        await asyncio.sleep(0)
        vm.submit_city("Wellington")
        await asyncio.sleep(0)

        service.gate("Wellington").set()
        await asyncio.sleep(0.01)
        service.gate("Auckland").set()
        await vm.wait_idle()

        # The older search finished last and wins.
        assert vm.store.state.current.location == "Auckland"

    @pytest.mark.anyio
    async def test_drop_stale_results(self):
        service = SlowService()
        vm = WeatherViewModel(service, drop_stale_results=True)

        first = vm.submit_city("Auckland")
        await asyncio.sleep(0)
        vm.submit_city("Wellington")
        await asyncio.sleep(0)

        service.gate("Wellington").set()
        await asyncio.sleep(0.01)
        service.gate("Auckland").set()
        await vm.wait_idle()

        assert first.result().cancelled
        state = vm.store.state
        assert state.current.location == "Wellington"
        assert state.forecast[0].temperature == len("Wellington")
        assert state.is_loading is False

    @pytest.mark.anyio
    async def test_crashed_search_is_logged_and_stops_loading(self, caplog):
        caplog.set_level(logging.ERROR, logger="kiwi.app.view_model")
        service = _service()
        service.fetch_current.side_effect = RuntimeError("boom")
        vm = WeatherViewModel(service)

        vm.submit_city("Auckland")
        await vm.wait_idle()

        assert "Background search failed" in caplog.text
        assert "RuntimeError: boom" in caplog.text
        assert vm.store.state.is_loading is False
