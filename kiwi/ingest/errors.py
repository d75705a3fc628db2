"""Error taxonomy for weather lookups.

Every error carries a ``message`` suitable for showing to the user as-is.
"""


class WeatherError(Exception):
    """Base class for failures surfaced to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(WeatherError):
    """Transport failure talking to the weather API."""


class NotFound(WeatherError):
    """The API answered with a non-200 ``cod`` field."""

    def __init__(self, message: str, server_message: str, code: str):
        super().__init__(message)
        self.server_message = server_message
        self.code = code


class MalformedResponse(WeatherError):
    """The response body lacks the required JSON shape."""
