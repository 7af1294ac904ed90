"""Agent client — conversational agent sessions and messages."""

import logging
import time
import uuid
from typing import Any, Optional

from app.config import settings
from app.services.errors import SessionExpiredError, UpstreamError
from app.services.salesforce import VendorClient

logger = logging.getLogger(__name__)


def _extract_reply(data: Any) -> Optional[Any]:
    """Return the agent's reply from a messages response.

    A single message is returned as-is (even if it is not a string) so the
    caller can reject it; several messages are joined with newlines.
    """
    if not isinstance(data, dict):
        return None
    messages = [m for m in data.get("messages") or [] if isinstance(m, dict)]
    if not messages:
        return None
    if len(messages) == 1:
        return messages[0].get("message")

    texts = [m.get("message") for m in messages]
    texts = [t for t in texts if isinstance(t, str) and t.strip()]
    return "\n".join(texts) if texts else None


class AgentClient(VendorClient):
    service_label = "Agent API"

    def _path(self, suffix: str) -> str:
        return f"{settings.AGENT_API_PATH.rstrip('/')}{suffix}"

    async def start_session(self) -> str:
        if not settings.AGENT_ID:
            raise UpstreamError("Agent authentication not configured: AGENT_ID is empty")

        response = await self._post(
            self._path(f"/agents/{settings.AGENT_ID}/sessions"),
            json={
                "externalSessionKey": str(uuid.uuid4()),
                "instanceConfig": {"endpoint": settings.SF_MY_DOMAIN_URL},
                "streamingCapabilities": {"chunkTypes": ["Text"]},
                "bypassUser": True,
            },
        )
        session_id = response.json().get("sessionId")
        if not session_id:
            raise UpstreamError("Agent API returned no sessionId")
        logger.info("Started agent session %s", session_id)
        return session_id

    async def send_message(self, session_id: str, text: str) -> Optional[Any]:
        try:
            response = await self._post(
                self._path(f"/sessions/{session_id}/messages"),
                json={
                    "message": {
                        "sequenceId": int(time.time() * 1000),
                        "type": "Text",
                        "text": text,
                    }
                },
            )
        except UpstreamError as e:
            if e.status_code == 404:
                raise SessionExpiredError(str(e), status_code=404) from e
            raise
        return _extract_reply(response.json())

    async def chat(self, text: str, session_id: Optional[str] = None) -> tuple[Optional[Any], str]:
        """Send text within a session, opening one when needed.

        Returns (reply, session_id). The session id differs from the one
        passed in when a new session was started or the old one had expired.
        """
        if not session_id:
            session_id = await self.start_session()
            return await self.send_message(session_id, text), session_id

        try:
            return await self.send_message(session_id, text), session_id
        except SessionExpiredError:
            logger.info("Agent session %s expired, starting a new one", session_id)
            session_id = await self.start_session()
            return await self.send_message(session_id, text), session_id


agent_client = AgentClient()
