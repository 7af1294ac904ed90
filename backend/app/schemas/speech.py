"""Speech-to-text and text-to-speech schemas."""

from typing import Optional

from app.schemas.common import CamelModel


class TranscriptionResponse(CamelModel):
    text: str
    duration: float = 0  # not reported by the vendor


class SpeechRequest(CamelModel):
    text: Optional[str] = None
    voice: Optional[str] = None  # null, empty or unknown names use the default voice
