"""Settings request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.config import settings
from app.schemas.common import CamelModel


class SettingsUpdate(CamelModel):
    """Full replacement of the settings row; omitted fields reset to defaults."""

    voice: str = Field(default=settings.DEFAULT_VOICE, min_length=1, max_length=50)
    language: Literal["english", "spanish"] = settings.DEFAULT_LANGUAGE
    auto_play: bool = True
    agent_name: str = Field(default="Agentforce", min_length=1, max_length=100)


class SettingsResponse(CamelModel):
    voice: str
    language: str
    auto_play: bool
    agent_name: str
    updated_at: datetime
