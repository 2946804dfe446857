"""Prompt templates and helpers that turn a forecast into an LLM instruction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType

from .models import WeatherForecast

DEFAULT_MAX_PERIODS = 4
DEFAULT_CHAR_LIMIT = 240


EMOJI_TIMELINE_TEMPLATE = """You are a helpful weather posting bot. You live in {city}. You only use weather reporting terms like: wind speed in mph, temperature in fahrenheit. You never make up the weather, because the actual forecast from the National Weather service is included in your context. It's labeled "Current Forecast"

Create a post (less than {char_limit} characters) that shows:
1. Current conditions with emoji at start
2. Today's weather timeline using emojis (morning→afternoon→evening)
3. High/low temps
4. Key weather events

Format example: 🌧️ Now: 45°F rain | Day: 🌥️→⛈️→🌙 | Hi: 52° Lo: 38° | Heavy rain 2-5pm

Do not make up anything.
Never add hashtags.
Include date/time from "Current Date".
Use emojis to show weather progression throughout the day.

Weather emoji guide:
☀️ = sunny/clear
⛅ = partly cloudy
☁️ = cloudy
🌧️ = rain
⛈️ = thunderstorm
🌨️ = snow
❄️ = heavy snow
🌫️ = fog
💨 = windy
🌙 = clear night

Pack maximum weather info using emojis and concise text.

Current Date: {date}
Current Forecast:

{forecast}"""


PLAIN_SUMMARY_TEMPLATE = """You are a helpful weather posting bot. You live in {city}. You report wind speed in mph and temperature in fahrenheit. The actual forecast from the National Weather service is included below, labeled "Current Forecast". Never make up weather that is not in it.

Write a friendly post (less than {char_limit} characters) summarizing the forecast:
- Start with one emoji for the current conditions.
- Mention the high and low temperatures.
- Mention rain, snow, storms, or strong wind if the forecast has them.
- Never add hashtags.
- Include the date/time from "Current Date".

Current Date: {date}
Current Forecast:

{forecast}"""


@dataclass(frozen=True)
class PromptStrategy:
    """How a city's prompt is built: template plus the limits it advertises."""
    name: str
    template: str
    max_periods: int = DEFAULT_MAX_PERIODS
    char_limit: int = DEFAULT_CHAR_LIMIT


EMOJI_TIMELINE = PromptStrategy(name="emoji_timeline", template=EMOJI_TIMELINE_TEMPLATE)
# Opt-in prose variant; every city defaults to EMOJI_TIMELINE.
PLAIN_SUMMARY = PromptStrategy(name="plain_summary", template=PLAIN_SUMMARY_TEMPLATE)

DEFAULT_STRATEGY = EMOJI_TIMELINE

PROMPT_STRATEGIES = MappingProxyType({
    EMOJI_TIMELINE.name: EMOJI_TIMELINE,
    PLAIN_SUMMARY.name: PLAIN_SUMMARY,
})


def format_prompt_timestamp(now: datetime) -> str:
    """Format like Ruby's Time#to_s with weekday: "Mon Jan 02 15:04:05 -0700 2006"."""
    return now.strftime("%a %b %d %H:%M:%S %z %Y").replace("  ", " ")


def format_forecast_periods(forecast: WeatherForecast, max_periods: int = DEFAULT_MAX_PERIODS) -> str:
    """Render the first `max_periods` periods as numbered lines."""
    lines = [
        f"Period {i} ({period.name}): {period.detailed_forecast}\n"
        for i, period in enumerate(forecast.periods[:max_periods], start=1)
    ]
    return "".join(lines)


def build_prompt(
    city_name: str,
    current_timestamp: str,
    forecast_text: str,
    strategy: PromptStrategy = DEFAULT_STRATEGY,
) -> str:
    """Substitute city, timestamp, and forecast text into the strategy's template."""
    return strategy.template.format(
        city=city_name,
        date=current_timestamp,
        forecast=forecast_text,
        char_limit=strategy.char_limit,
    )
