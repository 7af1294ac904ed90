"""User settings model — a single row of voice/language preferences."""

from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Integer, Boolean

from app.config import settings
from app.database import Base

SETTINGS_ROW_ID = 1


class UserSettings(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, default=SETTINGS_ROW_ID)
    voice = Column(String(50), nullable=False, default=settings.DEFAULT_VOICE)
    language = Column(String(20), nullable=False, default=settings.DEFAULT_LANGUAGE)  # english | spanish
    auto_play = Column(Boolean, nullable=False, default=True)
    agent_name = Column(String(100), nullable=False, default="Agentforce")
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))
