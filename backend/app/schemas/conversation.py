"""Conversation and turn request/response schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from app.schemas.common import CamelModel


class ConversationCreate(CamelModel):
    session_id: Optional[str] = None


class ConversationResponse(CamelModel):
    id: str
    session_id: Optional[str]
    created_at: datetime
    updated_at: datetime


class TurnCreate(CamelModel):
    role: Literal["user", "agent"]
    text: str = Field(min_length=1)


class TurnResponse(CamelModel):
    id: str
    conversation_id: str
    role: str
    text: str
    created_at: datetime
