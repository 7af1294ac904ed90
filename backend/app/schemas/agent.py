"""Agent chat request/response schemas."""

from typing import Optional

from app.schemas.common import CamelModel


class AgentChatRequest(CamelModel):
    # Presence is checked in the route so the 400 names the missing field
    text: Optional[str] = None
    conversation_id: Optional[str] = None


class AgentChatResponse(CamelModel):
    text: str  # plain text for TTS
    text_for_ui: str  # HTML or plain text for display
    has_html: bool
    conversation_id: str
    session_id: Optional[str]
