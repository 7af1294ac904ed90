"""Storage service — conversation, turn and settings persistence."""

import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.conversation import Conversation
from app.models.turn import Turn
from app.models.user_settings import UserSettings, SETTINGS_ROW_ID


def get_conversations(db: Session) -> list[Conversation]:
    return db.query(Conversation).order_by(Conversation.created_at.desc()).all()


def get_conversation(db: Session, conversation_id: str) -> Optional[Conversation]:
    return db.query(Conversation).filter(Conversation.id == conversation_id).first()


def create_conversation(db: Session, session_id: Optional[str] = None) -> Conversation:
    conversation = Conversation(id=str(uuid.uuid4()), session_id=session_id)
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    return conversation


def update_conversation_session_id(db: Session, conversation_id: str, session_id: Optional[str]) -> Conversation:
    """Store a vendor session id. No write when it is unchanged."""
    conversation = get_conversation(db, conversation_id)
    if not conversation:
        raise ValueError(f"Conversation {conversation_id} not found")
    if conversation.session_id != session_id:
        conversation.session_id = session_id
        db.commit()
        db.refresh(conversation)
    return conversation


def get_turns_by_conversation(db: Session, conversation_id: str) -> list[Turn]:
    return (
        db.query(Turn)
        .filter(Turn.conversation_id == conversation_id)
        .order_by(Turn.created_at.asc())
        .all()
    )


def create_turn(db: Session, conversation_id: str, role: str, text: str) -> Turn:
    """Insert a turn. The conversation must exist."""
    if not get_conversation(db, conversation_id):
        raise ValueError(f"Conversation {conversation_id} not found")

    turn = Turn(id=str(uuid.uuid4()), conversation_id=conversation_id, role=role, text=text)
    db.add(turn)
    db.commit()
    db.refresh(turn)
    return turn


def _find_settings(db: Session) -> Optional[UserSettings]:
    return db.query(UserSettings).filter(UserSettings.id == SETTINGS_ROW_ID).first()


def get_settings(db: Session) -> UserSettings:
    """Return the settings row, creating it with defaults on first read."""
    row = _find_settings(db)
    if row:
        return row
    row = UserSettings(id=SETTINGS_ROW_ID)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        # Another request inserted the row between our read and our insert
        db.rollback()
        return _find_settings(db)
    db.refresh(row)
    return row


def update_settings(db: Session, values: dict) -> UserSettings:
    """Replace every settings field with the given values."""
    row = get_settings(db)
    for key, value in values.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row
