"""Pydantic schemas for the three HTTP contracts a run talks to.

Weather provider (forecast periods), chat-completion endpoint (request and
choices), and the Bluesky XRPC endpoints (session, post record, created
record). Field aliases carry the wire names; Python code uses snake_case.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

POST_RECORD_TYPE = "app.bsky.feed.post"


class _WireModel(BaseModel):
    """Base model that accepts aliases or field names and ignores unknown keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Weather provider
# ---------------------------------------------------------------------------

class ForecastPeriod(_WireModel):
    """One labeled forecast segment, e.g. "Tonight"."""
    name: str = ""
    detailed_forecast: str = Field(default="", alias="detailedForecast")


class WeatherForecast(_WireModel):
    """Ordered forecast periods, nearest first."""
    periods: List[ForecastPeriod] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> "WeatherForecast":
        """
        Decode the provider body.

        The weather proxy wraps the National Weather Service forecast under
        "current": {"current": {"properties": {"periods": [...]}}}. A bare NWS
        body ({"properties": {"periods": [...]}}) is accepted as well.
        Raises ValueError (or pydantic.ValidationError) on any other shape.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        container = payload.get("current", payload)
        if not isinstance(container, dict):
            raise ValueError("'current' is not a JSON object")
        properties = container.get("properties") or {}
        if not isinstance(properties, dict):
            raise ValueError("'properties' is not a JSON object")
        return cls.model_validate({"periods": properties.get("periods") or []})


# ---------------------------------------------------------------------------
# Chat completion
# ---------------------------------------------------------------------------

class ChatMessage(_WireModel):
    role: str = "user"
    content: Optional[str] = ""


class CompletionRequest(_WireModel):
    model: str
    messages: List[ChatMessage]


class CompletionChoice(_WireModel):
    message: ChatMessage = Field(default_factory=lambda: ChatMessage(role="assistant"))


class CompletionResponse(_WireModel):
    choices: List[CompletionChoice] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Bluesky
# ---------------------------------------------------------------------------

def format_created_at(moment: datetime) -> str:
    """Render `moment` as UTC ISO-8601 with exactly three millisecond digits."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class SocialPost(_WireModel):
    """The app.bsky.feed.post record body."""
    type: str = Field(default=POST_RECORD_TYPE, alias="$type")
    text: str
    created_at: str = Field(alias="createdAt")

    @classmethod
    def create(cls, text: str, moment: datetime) -> "SocialPost":
        return cls(text=text, created_at=format_created_at(moment))

    def to_record(self) -> dict:
        """Serialize with wire names ($type, createdAt)."""
        return self.model_dump(by_alias=True)


class BlueskySession(_WireModel):
    """Subset of the createSession response needed to write records."""
    access_jwt: str = Field(alias="accessJwt")
    did: str = ""
    handle: str = ""


class CreatedRecord(_WireModel):
    uri: str = ""
    cid: str = ""
