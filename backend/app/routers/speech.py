"""Speech router — speech-to-text upload and text-to-speech audio."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.middleware.errors import upstream_failure
from app.middleware.rate_limit import limiter
from app.schemas.speech import SpeechRequest, TranscriptionResponse
from app.services import storage
from app.services.speech_client import AUDIO_SUBTYPES, speech_client
from app.services.voices import resolve_voice_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["speech"])


def is_audio_mime_type(mime_type: str) -> bool:
    return mime_type.startswith("audio/") and any(sub in mime_type for sub in AUDIO_SUBTYPES)


@router.post("/stt", response_model=TranscriptionResponse)
@limiter.limit(settings.VENDOR_RATE_LIMIT)
async def speech_to_text(
    request: Request,
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    """Transcribe an uploaded recording in the user's configured language."""
    if file is None:
        raise HTTPException(status_code=400, detail="No audio file provided")

    mime_type = file.content_type or ""
    if not is_audio_mime_type(mime_type):
        logger.info("Rejected upload %s with type %s", file.filename, mime_type)
        raise HTTPException(status_code=400, detail=f"Invalid file type: {mime_type}")

    content = await file.read(settings.MAX_AUDIO_BYTES + 1)
    if len(content) > settings.MAX_AUDIO_BYTES:
        raise HTTPException(
            status_code=400,
            detail=f"File too large (max {settings.MAX_AUDIO_BYTES // (1024 * 1024)}MB)",
        )

    logger.info("STT: received %s (%s, %d bytes)", file.filename, mime_type, len(content))
    language = storage.get_settings(db).language

    try:
        text = await speech_client.transcribe(content, mime_type, language)
    except Exception as e:
        logger.exception("Error transcribing audio")
        raise upstream_failure(
            e,
            "Audio transcription service",
            "Transcription failed",
            check_audio_format=True,
        )

    return TranscriptionResponse(text=text, duration=0)


async def _synthesize(text: Optional[str], voice: Optional[str]) -> Response:
    if not text or not isinstance(text, str):
        raise HTTPException(status_code=400, detail="Text is required")

    voice_id = resolve_voice_id(voice)
    try:
        audio = await speech_client.synthesize(text, voice_id)
    except Exception as e:
        logger.exception("Error generating speech")
        raise upstream_failure(e, "Speech generation service", "Speech generation failed")

    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/tts")
@limiter.limit(settings.VENDOR_RATE_LIMIT)
async def text_to_speech(
    request: Request,
    text: Optional[str] = None,
    voice: str = settings.DEFAULT_VOICE,
):
    """Synthesize text as MP3. GET so an <audio src> can point straight at it."""
    return await _synthesize(text, voice)


@router.post("/tts")
@limiter.limit(settings.VENDOR_RATE_LIMIT)
async def text_to_speech_post(request: Request, req: Optional[SpeechRequest] = None):
    if req is None:
        raise HTTPException(status_code=400, detail="Text is required")
    return await _synthesize(req.text, req.voice)
