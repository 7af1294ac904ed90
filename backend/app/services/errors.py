"""Upstream error type and user-facing classification of vendor failures."""

from typing import Optional


class UpstreamError(Exception):
    """A vendor API call failed (HTTP error, transport error, or bad payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SessionExpiredError(UpstreamError):
    """The agent vendor no longer recognises the session id."""


def classify_upstream_error(
    exc: Exception,
    service_name: str,
    failure_prefix: str,
    check_audio_format: bool = False,
) -> str:
    """Map an exception to a message the chat UI can show.

    Matching is by substring on the exception text, so vendor messages that
    carry an HTTP status code ("... error 429: ...") are caught too.

    Args:
        service_name:       e.g. "Speech generation service".
        failure_prefix:     e.g. "Speech generation failed".
        check_audio_format: STT only; treat vendor 400s as a bad recording.
    """
    message = str(exc)

    if check_audio_format and ("Invalid file format" in message or "400" in message):
        return "Invalid audio format. Please try recording again."
    if "authentication" in message or "401" in message:
        return f"{service_name} unavailable. Please try again later."
    if "timeout" in message or "ECONNRESET" in message:
        return "Network timeout. Please check your connection and try again."
    if "rate limit" in message or "429" in message:
        return "Service temporarily busy. Please wait a moment and try again."
    return f"{failure_prefix}: {message}"
