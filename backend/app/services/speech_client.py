"""Speech client — vendor transcription (STT) and synthesis (TTS)."""

import base64
import logging
from typing import Any

from app.config import settings
from app.services.errors import UpstreamError
from app.services.salesforce import VendorClient

logger = logging.getLogger(__name__)

LANGUAGE_CODES = {
    "english": "en-US",
    "spanish": "es-ES",
}

# Browsers send things like "audio/webm;codecs=opus", so match on substrings
AUDIO_SUBTYPES = ("wav", "mp3", "mpeg", "webm", "mp4", "ogg", "m4a", "flac")


def _filename_for(mime_type: str) -> str:
    for ext in AUDIO_SUBTYPES:
        if ext in mime_type:
            return f"audio.{'mp3' if ext == 'mpeg' else ext}"
    return "audio.bin"


def _extract_transcript(data: Any) -> str:
    """Pull the transcript out of a transcription response.

    Accepts {"transcript": str}, {"text": str}, {"transcription": str} or
    {"transcription": [{"transcript"|"text": str}, ...]}.
    """
    if not isinstance(data, dict):
        raise UpstreamError("Speech API returned an unexpected transcription payload")

    for key in ("transcript", "text"):
        if isinstance(data.get(key), str):
            return data[key].strip()

    segments = data.get("transcription")
    if isinstance(segments, str):
        return segments.strip()
    if isinstance(segments, list):
        parts = []
        for seg in segments:
            if isinstance(seg, dict):
                parts.append(seg.get("transcript") or seg.get("text") or "")
            elif isinstance(seg, str):
                parts.append(seg)
        return " ".join(p.strip() for p in parts if p and p.strip())

    raise UpstreamError("Speech API returned no transcript")


class SpeechClient(VendorClient):
    service_label = "Speech API"

    async def transcribe(self, audio: bytes, mime_type: str, language: str) -> str:
        """Send audio to the transcription endpoint and return the text."""
        language_code = LANGUAGE_CODES.get(language, language)
        logger.info("Transcribing %d bytes (%s, %s)", len(audio), mime_type, language_code)

        response = await self._post(
            settings.SPEECH_TRANSCRIBE_PATH,
            files={"input": (_filename_for(mime_type), audio, mime_type)},
            data={"language": language_code},
        )
        return _extract_transcript(response.json())

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        """Render text with the given vendor voice; returns MP3 bytes."""
        logger.info("Synthesizing %d chars with voice %s", len(text), voice_id)

        response = await self._post(
            settings.SPEECH_SYNTHESIZE_PATH,
            json={
                "text": text,
                "voiceId": voice_id,
                "modelId": settings.SPEECH_TTS_MODEL,
            },
        )

        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            data = response.json()
            encoded = None
            if isinstance(data, dict):
                encoded = data.get("audioStream") or data.get("audio")
            if not encoded:
                raise UpstreamError("Speech API returned no audio")
            return base64.b64decode(encoded)

        if not response.content:
            raise UpstreamError("Speech API returned no audio")
        return response.content


speech_client = SpeechClient()
