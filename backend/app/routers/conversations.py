"""Conversations router — conversation and turn history."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.errors import invalid_payload
from app.schemas.conversation import (
    ConversationCreate,
    ConversationResponse,
    TurnCreate,
    TurnResponse,
)
from app.services import storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationResponse])
def list_conversations(db: Session = Depends(get_db)):
    """List all conversations, newest first."""
    try:
        conversations = storage.get_conversations(db)
    except SQLAlchemyError:
        logger.exception("Error fetching conversations")
        raise HTTPException(status_code=500, detail="Failed to fetch conversations")
    return [ConversationResponse.model_validate(c) for c in conversations]


@router.post("", response_model=ConversationResponse)
def create_conversation(
    req: Optional[ConversationCreate] = None,
    db: Session = Depends(get_db),
):
    """Start a new conversation. The agent session id is usually attached later."""
    try:
        conversation = storage.create_conversation(db, session_id=req.session_id if req else None)
    except SQLAlchemyError:
        logger.exception("Error creating conversation")
        raise HTTPException(status_code=500, detail="Failed to create conversation")
    return ConversationResponse.model_validate(conversation)


@router.get("/{conversation_id}", response_model=ConversationResponse)
def get_conversation(conversation_id: str, db: Session = Depends(get_db)):
    try:
        conversation = storage.get_conversation(db, conversation_id)
    except SQLAlchemyError:
        logger.exception("Error fetching conversation %s", conversation_id)
        raise HTTPException(status_code=500, detail="Failed to fetch conversation")
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return ConversationResponse.model_validate(conversation)


@router.get("/{conversation_id}/turns", response_model=list[TurnResponse])
def list_turns(conversation_id: str, db: Session = Depends(get_db)):
    """Turns of a conversation in the order they were spoken."""
    try:
        if not storage.get_conversation(db, conversation_id):
            raise HTTPException(status_code=404, detail="Conversation not found")
        turns = storage.get_turns_by_conversation(db, conversation_id)
    except SQLAlchemyError:
        logger.exception("Error fetching turns for %s", conversation_id)
        raise HTTPException(status_code=500, detail="Failed to fetch turns")
    return [TurnResponse.model_validate(t) for t in turns]


@router.post("/{conversation_id}/turns", response_model=TurnResponse)
def create_turn(
    conversation_id: str,
    payload: Any = Body(None),
    db: Session = Depends(get_db),
):
    """Append a user or agent turn.

    The conversation is looked up before the payload is validated, so an
    unknown conversation is a 404 whatever the body contains.
    """
    try:
        conversation = storage.get_conversation(db, conversation_id)
    except SQLAlchemyError:
        logger.exception("Error fetching conversation %s", conversation_id)
        raise HTTPException(status_code=500, detail="Failed to create turn")

    if not conversation:
        logger.info("Cannot create turn: conversation %s not found", conversation_id)
        raise HTTPException(
            status_code=404,
            detail={
                "error": "Conversation not found",
                "message": f"Cannot create turn for non-existent conversation: {conversation_id}",
            },
        )

    try:
        req = TurnCreate.model_validate(payload if payload is not None else {})
    except ValidationError as e:
        raise invalid_payload("Invalid turn data", e)

    try:
        turn = storage.create_turn(db, conversation_id, req.role, req.text)
    except SQLAlchemyError:
        logger.exception("Error creating turn for %s", conversation_id)
        raise HTTPException(status_code=500, detail="Failed to create turn")
    return TurnResponse.model_validate(turn)
