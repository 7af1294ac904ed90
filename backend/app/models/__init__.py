"""SQLAlchemy ORM models."""

from app.models.conversation import Conversation
from app.models.turn import Turn
from app.models.user_settings import UserSettings

__all__ = [
    "Conversation",
    "Turn",
    "UserSettings",
]
