"""Post LLM-written weather forecasts to Bluesky, one city per run."""

__version__ = "0.3.0"
