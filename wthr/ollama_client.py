"""Thin client for Ollama's OpenAI-compatible chat-completion endpoint."""

from __future__ import annotations

from typing import Optional

import requests
from pydantic import ValidationError

from .errors import CompletionError
from .models import ChatMessage, CompletionRequest, CompletionResponse
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="ollama_client")


def strip_wrapping_quotes(text: str) -> str:
    """Trim outer whitespace, then drop one pair of surrounding double quotes.

    Models like to wrap their answer in quotes. Text that is not wrapped comes
    back with only its outer whitespace removed.
    """
    stripped = text.strip()
    if len(stripped) >= 2 and stripped.startswith('"') and stripped.endswith('"'):
        return stripped[1:-1]
    return stripped


class CompletionClient:
    """Minimal client for a single-message chat completion."""

    def __init__(
        self,
        endpoint: str,
        model: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.url = endpoint
        self.model = model
        # without a shared session, requests.post opens and closes its own
        self.session = session or requests
        self.timeout = timeout

    def complete(self, prompt: str) -> str:
        """Send `prompt` as the user message and return the first choice's text."""
        payload = CompletionRequest(
            model=self.model,
            messages=[ChatMessage(role="user", content=prompt)],
        ).model_dump()

        logger.debug("Ollama POST payload: %s", payload)
        try:
            r = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise CompletionError(
                f"LLM request failed: POST request failed: {exc} (model={self.model}, url={mask_url(self.url)})"
            ) from exc

        logger.info(
            "Ollama POST took %.2fs, response: %s",
            r.elapsed.total_seconds(),
            r.text[:200],
        )
        if not 200 <= r.status_code < 300:
            raise CompletionError(
                f"LLM request failed with status {r.status_code}: {(r.text or '')[:200]} "
                f"(model={self.model}, url={mask_url(self.url)})"
            )

        try:
            data = CompletionResponse.model_validate(r.json())
        except (ValueError, ValidationError) as exc:
            raise CompletionError(f"LLM returned non-JSON response: {(r.text or '')[:200]}") from exc

        if not data.choices or not data.choices[0].message.content:
            raise CompletionError(f"empty LLM response (model={self.model})")

        text = strip_wrapping_quotes(data.choices[0].message.content)
        if not text.strip():
            raise CompletionError(f"empty LLM response after trimming quotes (model={self.model})")
        return text


def complete(endpoint: str, model: str, prompt: str, **kwargs) -> str:
    """One-shot helper around CompletionClient."""
    return CompletionClient(endpoint, model, **kwargs).complete(prompt)
