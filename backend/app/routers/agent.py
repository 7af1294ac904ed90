"""Agent router — forward user text to the conversational agent."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.middleware.errors import upstream_failure
from app.middleware.rate_limit import limiter
from app.schemas.agent import AgentChatRequest, AgentChatResponse
from app.services import storage
from app.services.agent_client import agent_client
from app.services.response_processor import process_agent_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["agent"])


@router.post("/agentforce", response_model=AgentChatResponse)
@limiter.limit(settings.VENDOR_RATE_LIMIT)
async def chat_with_agent(
    request: Request,
    req: AgentChatRequest,
    db: Session = Depends(get_db),
):
    """Send the user's text to the agent within the conversation's session.

    Returns plain text for TTS plus a display variant that may contain HTML.
    A session id issued or rotated by the vendor is stored on the conversation.
    """
    if not req.text or not req.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    if not req.conversation_id:
        raise HTTPException(status_code=400, detail="ConversationId is required")

    conversation = storage.get_conversation(db, req.conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")

    try:
        reply, session_id = await agent_client.chat(req.text, conversation.session_id)
    except Exception as e:
        logger.exception("Error calling agent for conversation %s", conversation.id)
        raise upstream_failure(e, "Agent service", "Agent request failed")

    if not isinstance(reply, str) or not reply.strip():
        logger.error("Agent returned invalid response: %r", reply)
        raise HTTPException(
            status_code=500,
            detail={
                "error": "Agent response invalid",
                "details": "The agent did not provide a valid text response",
            },
        )

    logger.info("Agent reply (%d chars): %s", len(reply), reply[:100])
    processed = process_agent_response(reply)
    if processed.has_html:
        logger.info("Detected structured agent reply with HTML")

    storage.update_conversation_session_id(db, conversation.id, session_id)

    return AgentChatResponse(
        text=processed.text_for_tts,
        text_for_ui=processed.text_for_ui,
        has_html=processed.has_html,
        conversation_id=conversation.id,
        session_id=session_id,
    )
