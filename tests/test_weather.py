"""Tests for icssim.weather."""

import httpx
import pytest

from icssim.weather import AmbientReading, WeatherClient, WeatherError


def make_client(handler):
    transport = httpx.MockTransport(handler)
    return WeatherClient(
        api_key="key", city="Berlin", client=httpx.Client(transport=transport)
    )


class TestWeatherClient:
    def test_reading(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"main": {"temp": 12.5, "humidity": 81}})

        reading = make_client(handler).get_current_weather()

        assert reading == AmbientReading(temperature=12.5, humidity=81.0)
        params = requests[0].url.params
        assert params["q"] == "Berlin"
        assert params["appid"] == "key"
        assert params["units"] == "metric"
        assert params["lang"] == "en"

    def test_http_error(self):
        client = make_client(lambda request: httpx.Response(401))
        with pytest.raises(WeatherError):
            client.get_current_weather()

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(WeatherError):
            make_client(handler).get_current_weather()

    def test_not_json(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(WeatherError):
            client.get_current_weather()

    @pytest.mark.parametrize(
        "payload",
        [{}, {"main": {"temp": 12.5}}, {"main": {"temp": None, "humidity": 3}}],
    )
    def test_malformed_payload(self, payload):
        client = make_client(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(WeatherError):
            client.get_current_weather()

    def test_empty_api_key(self):
        with pytest.raises(ValueError):
            WeatherClient(api_key="", city="Berlin")
