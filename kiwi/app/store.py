"""Explicit state container for the weather screen.

State is an immutable snapshot replaced on every update; subscribers are
called synchronously with the new snapshot. All updates happen on the
event loop thread, so there is exactly one writer.
"""

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from kiwi.ingest.owm_client import LocationQuery
from kiwi.models.weather import CurrentConditions, ForecastEntry

logger = logging.getLogger(__name__)

Subscriber = Callable[["WeatherState"], None]


@dataclass(frozen=True)
class WeatherState:
    current: CurrentConditions | None = None
    forecast: tuple[ForecastEntry, ...] = ()
    is_loading: bool = False
    error_message: str | None = None
    query: LocationQuery | None = None


@dataclass
class RequestToken:
    """Handle for one search. Results are applied only while it is live."""

    request_id: int
    query: LocationQuery
    cancelled: bool = field(default=False)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def live(self) -> bool:
        return not self.cancelled


class WeatherStore:
    def __init__(self, initial: WeatherState | None = None):
        self._state = initial or WeatherState()
        self._subscribers: list[Subscriber] = []
        self._ids = itertools.count(1)

    @property
    def state(self) -> WeatherState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def new_token(self, query: LocationQuery) -> RequestToken:
        return RequestToken(request_id=next(self._ids), query=query)

    def update(self, **changes) -> WeatherState:
        self._state = replace(self._state, **changes)
        for callback in list(self._subscribers):
            try:
                callback(self._state)
            except Exception:
                logger.exception("Weather state subscriber failed")
        return self._state
