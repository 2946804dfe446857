"""Publish a post to Bluesky through the AT Protocol XRPC endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import requests
from pydantic import ValidationError

from .config import DEFAULT_BSKY_SERVICE_URL
from .errors import PublishError
from .models import POST_RECORD_TYPE, BlueskySession, CreatedRecord, SocialPost
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="bluesky")

CREATE_SESSION_NSID = "com.atproto.server.createSession"
CREATE_RECORD_NSID = "com.atproto.repo.createRecord"


def _xrpc_error(resp: requests.Response) -> str:
    """Describe a failed XRPC response using its {"error", "message"} body when present."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and (body.get("error") or body.get("message")):
        return f"status {resp.status_code}: {body.get('error', '')} {body.get('message', '')}".strip()
    return f"status {resp.status_code}: {(resp.text or '')[:200]}"


class BlueskyClient:
    """Just enough of the XRPC API to log in and create one record."""

    def __init__(
        self,
        service_url: str = DEFAULT_BSKY_SERVICE_URL,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.service_url = service_url.rstrip("/")
        # without a shared session, requests.post opens and closes its own
        self.session = session or requests
        self.timeout = timeout

    def _url(self, nsid: str) -> str:
        return f"{self.service_url}/xrpc/{nsid}"

    def _post(self, nsid: str, payload: dict, headers: Optional[dict] = None) -> Any:
        try:
            resp = self.session.post(self._url(nsid), json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise PublishError(f"{nsid} request failed: {exc}") from exc
        if not 200 <= resp.status_code < 300:
            raise PublishError(f"{nsid} failed with {_xrpc_error(resp)}")
        try:
            return resp.json()
        except ValueError as exc:
            raise PublishError(f"{nsid} returned non-JSON response: {(resp.text or '')[:200]}") from exc

    def create_session(self, identifier: str, password: str) -> BlueskySession:
        """Exchange handle + app password for an access token."""
        data = self._post(CREATE_SESSION_NSID, {"identifier": identifier, "password": password})
        try:
            return BlueskySession.model_validate(data)
        except ValidationError as exc:
            raise PublishError(f"{CREATE_SESSION_NSID} returned no access token") from exc

    def create_record(self, auth: BlueskySession, repo: str, collection: str, record: dict) -> CreatedRecord:
        """Write `record` into `repo`'s `collection` using the session's token."""
        data = self._post(
            CREATE_RECORD_NSID,
            {"repo": repo, "collection": collection, "record": record},
            headers={"Authorization": f"Bearer {auth.access_jwt}"},
        )
        try:
            return CreatedRecord.model_validate(data if isinstance(data, dict) else {})
        except ValidationError as exc:
            raise PublishError(f"{CREATE_RECORD_NSID} returned an unexpected body") from exc


def publish(
    identifier: str,
    password: str,
    text: str,
    *,
    client: Optional[BlueskyClient] = None,
    now: Optional[datetime] = None,
) -> CreatedRecord:
    """Log in as `identifier` and create one app.bsky.feed.post with `text`."""
    client = client or BlueskyClient()

    try:
        auth = client.create_session(identifier, password)
    except PublishError as exc:
        raise PublishError(f"create session failed: {exc}") from exc
    logger.debug("Session created for %s", auth.handle or identifier)

    post = SocialPost.create(text, now or datetime.now(timezone.utc))
    try:
        created = client.create_record(auth, identifier, POST_RECORD_TYPE, post.to_record())
    except PublishError as exc:
        raise PublishError(f"create record failed: {exc}") from exc

    logger.info("Created record %s", created.uri or "<no uri>")
    return created
