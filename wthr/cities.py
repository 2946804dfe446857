"""Static per-city configuration: coordinates, Bluesky account, and model."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .prompts import DEFAULT_STRATEGY, PromptStrategy


@dataclass(frozen=True)
class CityConfig:
    """Everything that differs between the city accounts."""
    key: str
    name: str
    latitude: float
    longitude: float
    identifier: str  # Bluesky handle
    password_env: str  # env var holding the account's app password
    model: str
    prompt_strategy: PromptStrategy = field(default=DEFAULT_STRATEGY)


CITY_CONFIGS: Mapping[str, CityConfig] = MappingProxyType({
    "msp": CityConfig(
        key="msp",
        name="Minneapolis St Paul",
        latitude=44.88194,
        longitude=-93.22167,
        identifier="msp.wthr.cloud",
        password_env="MSP_WTHR_BSKY_PASS",
        model="mistral:7b",
    ),
    "chicago": CityConfig(
        key="chicago",
        name="Chicago",
        latitude=41.975844,
        longitude=-87.6633969,
        identifier="chicago.wthr.cloud",
        password_env="CHICAGO_WTHR_BSKY_PASS",
        model="mistral-nemo",
    ),
    "sfo": CityConfig(
        key="sfo",
        name="San Francisco",
        latitude=37.7897,
        longitude=-122.3972,
        identifier="sfo.wthr.cloud",
        password_env="SFO_WTHR_BSKY_PASS",
        model="mistral-nemo",
    ),
    "nyc": CityConfig(
        key="nyc",
        name="New York City",
        latitude=40.7128,
        longitude=-74.0060,
        identifier="nyc.wthr.cloud",
        password_env="NYC_WTHR_BSKY_PASS",
        model="mistral-nemo",
    ),
})


def city_keys(cities: Mapping[str, CityConfig] = CITY_CONFIGS) -> list[str]:
    """Sorted city keys, as shown in usage messages."""
    return sorted(cities)
