"""
Weather Station - Error types
Only two failure kinds reach clients: bad input and storage trouble.
"""


class WeatherStationError(Exception):
    """Base error rendered as {"error": message}."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(WeatherStationError):
    """Client-supplied data failed the numeric-field contract."""

    status_code = 400
    default_message = "Invalid data"


class StorageError(WeatherStationError):
    """The database is unavailable or rejected the operation."""

    status_code = 500
    default_message = "Storage error"
