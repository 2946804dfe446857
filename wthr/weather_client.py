"""Fetch the forecast periods for a coordinate from the weather proxy."""

from __future__ import annotations

from typing import Optional

import requests
from pydantic import ValidationError

from .errors import WeatherFetchError
from .models import WeatherForecast
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="weather_client")


def fetch_forecast(
    base_url: str,
    latitude: float,
    longitude: float,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> WeatherForecast:
    """GET `base_url?latitude=..&longitude=..` and decode the forecast periods."""
    # without a shared session, requests.get opens and closes its own
    session = session or requests
    params = {
        "latitude": f"{latitude:f}",
        "longitude": f"{longitude:f}",
    }

    logger.info("Fetching forecast from %s for (%s, %s)", mask_url(base_url), params["latitude"], params["longitude"])
    try:
        resp = session.get(base_url, params=params, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.RequestException as exc:
        raise WeatherFetchError(f"fetch weather failed: GET request failed: {exc}") from exc

    try:
        forecast = WeatherForecast.from_payload(resp.json())
    except (ValueError, ValidationError) as exc:
        raise WeatherFetchError(f"fetch weather failed: JSON decode failed: {exc}") from exc

    logger.debug("Forecast has %d periods", len(forecast.periods))
    return forecast
