"""Exceptions raised while producing and publishing a weather post."""

from __future__ import annotations


class WthrError(RuntimeError):
    """Base class for every failure that should abort a run."""


class ConfigurationError(WthrError):
    """A flag, city key, or required environment variable is missing or invalid."""


class WeatherFetchError(WthrError):
    """The weather provider could not be reached or returned an unusable body."""


class CompletionError(WthrError):
    """The completion endpoint failed or returned no usable text."""


class PublishError(WthrError):
    """Session or record creation against the social network failed."""


class PostRunError(WthrError):
    """A step of a city's run failed; carries the city and the step name."""

    def __init__(self, city: str, step: str, cause: BaseException):
        self.city = city
        self.step = step
        self.cause = cause
        super().__init__(f"{step} for {city} failed: {cause}")
