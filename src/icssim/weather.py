"""
Weather Client
==============

OpenWeatherMap current-weather lookup used to seed the climate control
unit's ambient temperature and humidity.

The client is a plain request/response wrapper: any transport, HTTP or
payload problem is raised as WeatherError and the caller decides what to
keep.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

OPENWEATHERMAP_URL = "https://api.openweathermap.org/data/2.5/weather"


class WeatherError(Exception):
    """Ambient reading could not be fetched."""


@dataclass(frozen=True)
class AmbientReading:
    temperature: float  # [°C]
    humidity: float  # [%]


class WeatherClient:
    """
    Current weather for one city.

    Example:
    >>> client = WeatherClient(api_key="...", city="Berlin")
    >>> reading = client.get_current_weather()
    >>> reading.temperature
    12.3
    """

    def __init__(
        self,
        api_key: str,
        city: str,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
        url: str = OPENWEATHERMAP_URL,
    ):
        if not api_key:
            raise ValueError("OpenWeatherMap API key must not be empty")

        self.api_key = api_key
        self.city = city
        self.url = url
        self._client = client or httpx.Client(timeout=timeout)

    def get_current_weather(self) -> AmbientReading:
        """
        Fetch current temperature [°C] and humidity [%].

        Raises:
            WeatherError: Request failed or the payload is malformed
        """
        params = {"q": self.city, "appid": self.api_key, "units": "metric", "lang": "en"}

        try:
            response = self._client.get(self.url, params=params)
            response.raise_for_status()
            main = response.json()["main"]
            reading = AmbientReading(
                temperature=float(main["temp"]),
                humidity=float(main["humidity"]),
            )
        except httpx.HTTPError as e:
            raise WeatherError(f"Weather request for {self.city} failed: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise WeatherError(f"Malformed weather payload for {self.city}") from e

        logger.info(
            f"Temperature: {reading.temperature}, Humidity: {reading.humidity}"
        )
        return reading

    def close(self):
        self._client.close()
