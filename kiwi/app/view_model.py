"""View-model driving a lookup: current conditions, then the forecast."""

import asyncio
import logging

from kiwi.app.store import RequestToken, WeatherStore
from kiwi.ingest.errors import WeatherError
from kiwi.ingest.owm_client import LocationQuery
from kiwi.ingest.weather_service import WeatherService
from kiwi.notify.rules import should_alert
from kiwi.notify.scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


class WeatherViewModel:
    """Runs one fetch pipeline per search and publishes results to a store.

    A new search does not cancel earlier ones unless ``drop_stale_results``
    is set, so with the default a slow earlier request can still overwrite
    the state of a newer one.
    """

    def __init__(
        self,
        service: WeatherService,
        store: WeatherStore | None = None,
        scheduler: NotificationScheduler | None = None,
        alerts_enabled: bool = True,
        alert_delay_hours: int = 1,
        drop_stale_results: bool = False,
    ):
        self.service = service
        self.store = store or WeatherStore()
        self.scheduler = scheduler
        self.alerts_enabled = alerts_enabled
        self.alert_delay_hours = alert_delay_hours
        self.drop_stale_results = drop_stale_results
        self._active: RequestToken | None = None
        self._tasks: set[asyncio.Task] = set()

    async def search_city(self, city: str) -> RequestToken | None:
        """Look up a city by name. Blank input is ignored."""
        city = city.strip()
        if not city:
            return None
        return await self._run(LocationQuery.for_city(city))

    async def search_location(
        self, latitude: float, longitude: float
    ) -> RequestToken | None:
        """Look up a coordinate fix."""
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            self.store.update(
                is_loading=False, current=None, error_message="Invalid location"
            )
            return None
        return await self._run(LocationQuery.for_coordinates(latitude, longitude))

    def submit_city(self, city: str) -> asyncio.Task:
        """Start a city search in the background, as a UI event would."""
        return self._spawn(self.search_city(city))

    def submit_location(self, latitude: float, longitude: float) -> asyncio.Task:
        return self._spawn(self.search_location(latitude, longitude))

    async def wait_idle(self) -> None:
        """Wait for every background search to finish.

        Unexpected failures are logged and clear the loading flag left by
        the crashed search.
        """
        failed = False
        while self._tasks:
            results = await asyncio.gather(*list(self._tasks), return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    failed = True
                    logger.error("Background search failed", exc_info=result)
        if failed and self.store.state.is_loading:
            self.store.update(is_loading=False)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _begin(self, query: LocationQuery) -> RequestToken:
        token = self.store.new_token(query)
        if self.drop_stale_results and self._active is not None:
            logger.debug("Cancelling request #%d", self._active.request_id)
            self._active.cancel()
        self._active = token
        self.store.update(
            is_loading=True, error_message=None, current=None, query=query
        )
        return token

    async def _run(self, query: LocationQuery) -> RequestToken:
        token = self._begin(query)

        try:
            current = await self.service.fetch_current(query)
        except WeatherError as e:
            if token.live:
                self.store.update(is_loading=False, error_message=e.message)
            else:
                logger.info("Dropping stale error for request #%d", token.request_id)
            return token

        if not token.live:
            logger.info("Dropping stale result for request #%d", token.request_id)
            return token
        self.store.update(current=current, is_loading=False)
        self._maybe_alert(current.condition, current.temperature)

        try:
            entries = await self.service.fetch_forecast(query)
        except WeatherError as e:
            logger.warning("Forecast error for %s: %s", query.describe(), e.message)
            return token

        if token.live:
            self.store.update(forecast=tuple(entries))
        else:
            logger.info("Dropping stale forecast for request #%d", token.request_id)
        return token

    def _maybe_alert(self, condition: str, temperature: float) -> None:
        if self.scheduler is None or not self.alerts_enabled:
            return
        if should_alert(condition, temperature):
            self.scheduler.schedule_alert(
                condition, temperature, in_hours=self.alert_delay_hours
            )
