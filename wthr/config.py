"""Run configuration pulled from environment variables via pydantic."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .cities import CITY_CONFIGS, CityConfig, city_keys
from .errors import ConfigurationError
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="config")

DEFAULT_BSKY_SERVICE_URL = "https://bsky.social"


class Settings(BaseSettings):
    """Environment-driven configuration shared by every city."""
    model_config = SettingsConfigDict(env_prefix="", env_ignore_empty=True, extra="ignore")

    weather_api_url: str = ""
    ollama_api_url: str = ""
    bsky_service_url: str = DEFAULT_BSKY_SERVICE_URL
    http_timeout_seconds: Optional[float] = None
    log_level: str = "INFO"

    @field_validator("weather_api_url", "ollama_api_url", mode="after")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return str(v).strip()

    @field_validator("bsky_service_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).strip().rstrip("/") or DEFAULT_BSKY_SERVICE_URL


@dataclass(frozen=True)
class RunConfig:
    """Everything one run needs, resolved before any network I/O."""
    city: CityConfig
    weather_api_url: str
    completion_api_url: str
    bsky_service_url: str
    password: Optional[str]
    dry_run: bool
    http_timeout_seconds: Optional[float] = None


def _env_name(field_name: str) -> str:
    return field_name.upper()


def require_setting(settings: Settings, field_name: str) -> str:
    """Return a non-empty setting or raise naming its environment variable."""
    value = getattr(settings, field_name)
    if not value:
        raise ConfigurationError(f"Environment variable {_env_name(field_name)} is required")
    return value


def require_env(key: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return a non-empty environment variable or raise naming it."""
    environ = os.environ if environ is None else environ
    value = environ.get(key, "")
    if not value:
        raise ConfigurationError(f"Environment variable {key} is required")
    return value


def lookup_city(city_key: Optional[str], cities: Mapping[str, CityConfig] = CITY_CONFIGS) -> CityConfig:
    """Return the city's config or raise listing the valid keys."""
    choices = ", ".join(city_keys(cities))
    if not city_key:
        raise ConfigurationError(f"City is required. Use --city with one of: {choices}")
    try:
        return cities[city_key]
    except KeyError:
        raise ConfigurationError(f"Unknown city: {city_key}. Available cities: {choices}") from None


def resolve_run_config(
    city_key: Optional[str],
    dry_run: bool,
    settings: Settings,
    cities: Mapping[str, CityConfig] = CITY_CONFIGS,
    environ: Optional[Mapping[str, str]] = None,
) -> RunConfig:
    """
    Validate the city selector and the required environment.

    The account password is only required when the run will publish.
    """
    city = lookup_city(city_key, cities)
    weather_api_url = require_setting(settings, "weather_api_url")
    completion_api_url = require_setting(settings, "ollama_api_url")
    password = None if dry_run else require_env(city.password_env, environ)

    logger.debug(
        "Resolved config for %s: weather=%s completion=%s bsky=%s dry_run=%s",
        city.key,
        mask_url(weather_api_url),
        mask_url(completion_api_url),
        settings.bsky_service_url,
        dry_run,
    )
    return RunConfig(
        city=city,
        weather_api_url=weather_api_url,
        completion_api_url=completion_api_url,
        bsky_service_url=settings.bsky_service_url,
        password=password,
        dry_run=dry_run,
        http_timeout_seconds=settings.http_timeout_seconds,
    )
