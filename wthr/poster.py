"""Run one city's weather post: forecast -> prompt -> completion -> publish."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import Callable, Optional, TextIO

import requests

from . import bluesky, ollama_client, weather_client
from .config import RunConfig
from .errors import PostRunError, WthrError
from .models import CreatedRecord, WeatherForecast
from .prompts import build_prompt, format_forecast_periods, format_prompt_timestamp
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="poster")

WeatherFetcher = Callable[[str, float, float], WeatherForecast]
Completer = Callable[[str, str, str], str]
Publisher = Callable[[str, str, str], CreatedRecord]

RULE = "━" * 40


@dataclass
class RunResult:
    """Outcome of a successful run."""
    city: str
    text: str
    dry_run: bool
    record: Optional[CreatedRecord] = None


def _local_now() -> datetime:
    return datetime.now().astimezone()


def print_dry_run(city_name: str, text: str, char_limit: int, out: TextIO) -> None:
    """Show the generated post and its length instead of publishing it."""
    print(f"\n🔵 DRY RUN - Generated post for {city_name}:", file=out)
    print(RULE, file=out)
    print(text, file=out)
    print(RULE, file=out)
    print(f"Character count: {len(text)}/{char_limit}", file=out)


def run_city(
    run_config: RunConfig,
    *,
    session: Optional[requests.Session] = None,
    fetch_weather: Optional[WeatherFetcher] = None,
    completer: Optional[Completer] = None,
    publisher: Optional[Publisher] = None,
    clock: Callable[[], datetime] = _local_now,
    out: Optional[TextIO] = None,
) -> RunResult:
    """
    Produce and (unless dry-run) publish one post for `run_config.city`.

    Every step failure is raised as PostRunError naming the city and step.
    """
    city = run_config.city
    strategy = city.prompt_strategy
    timeout = run_config.http_timeout_seconds
    out = out or sys.stdout

    if fetch_weather is None:
        fetch_weather = partial(weather_client.fetch_forecast, session=session, timeout=timeout)
    if completer is None:
        completer = partial(ollama_client.complete, session=session, timeout=timeout)
    if publisher is None:
        client = bluesky.BlueskyClient(run_config.bsky_service_url, session=session, timeout=timeout)
        publisher = partial(bluesky.publish, client=client)

    try:
        forecast = fetch_weather(run_config.weather_api_url, city.latitude, city.longitude)
    except WthrError as exc:
        raise PostRunError(city.name, "weather fetch", exc) from exc
    if not forecast.periods:
        logger.warning("Forecast for %s has no periods", city.name)

    forecast_text = format_forecast_periods(forecast, strategy.max_periods)
    prompt = build_prompt(city.name, format_prompt_timestamp(clock()), forecast_text, strategy)

    try:
        text = completer(run_config.completion_api_url, city.model, prompt)
    except WthrError as exc:
        raise PostRunError(city.name, "post generation", exc) from exc

    logger.info("Generated post for %s: %s", city.name, text)
    if len(text) > strategy.char_limit:
        logger.warning(
            "Post for %s is %d characters, over the %d requested", city.name, len(text), strategy.char_limit
        )

    if run_config.dry_run:
        print_dry_run(city.name, text, strategy.char_limit, out)
        return RunResult(city=city.key, text=text, dry_run=True)

    if not run_config.password:
        raise PostRunError(city.name, "publish", WthrError(f"no password resolved from {city.password_env}"))
    try:
        record = publisher(city.identifier, run_config.password, text)
    except WthrError as exc:
        raise PostRunError(city.name, "publish", exc) from exc

    logger.info("Successfully posted weather for %s", city.name)
    return RunResult(city=city.key, text=text, dry_run=False, record=record)
