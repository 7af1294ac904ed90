"""Agent reply post-processing — split a reply into UI (HTML) and TTS (plain) text."""

import json
import re
from typing import NamedTuple

_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)
_P_CLOSE = re.compile(r"</p>", re.IGNORECASE)
_LI_OPEN = re.compile(r"<li[^>]*>", re.IGNORECASE)
_LI_CLOSE = re.compile(r"</li>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")
_EXTRA_BLANK_LINES = re.compile(r"\n\s*\n\s*\n")

# Order matters: &amp; is decoded before &lt;/&gt;.
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


class ProcessedReply(NamedTuple):
    text_for_tts: str
    text_for_ui: str
    has_html: bool


def strip_html_tags(html: str) -> str:
    """Convert agent HTML to text suitable for speech synthesis."""
    text = _BR.sub("\n", html)
    text = _P_CLOSE.sub("\n\n", text)
    text = _LI_OPEN.sub("\n• ", text)
    text = _LI_CLOSE.sub("", text)
    text = _ANY_TAG.sub("", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    text = _EXTRA_BLANK_LINES.sub("\n\n", text)
    return text.strip()


def _structured_html(parsed) -> tuple[str, str] | None:
    """Return (message, html) if parsed matches {message, data: [{value: {promptResponse}}]}."""
    if not isinstance(parsed, dict):
        return None
    data = parsed.get("data")
    if not isinstance(data, list) or not data:
        return None
    first = data[0]
    if not isinstance(first, dict) or not isinstance(first.get("value"), dict):
        return None
    html = first["value"].get("promptResponse")
    if not html:
        return None
    return str(parsed.get("message") or ""), str(html)


def process_agent_response(raw: str) -> ProcessedReply:
    """Split a raw agent reply into TTS and UI variants.

    Replies that are not the structured JSON shape are used verbatim for both.
    """
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return ProcessedReply(raw, raw, False)

    structured = _structured_html(parsed)
    if structured is None:
        return ProcessedReply(raw, raw, False)

    message, html = structured
    text_for_ui = f"<p>{message}</p>\n{html}" if message else html
    text_for_tts = (message + "\n" + strip_html_tags(html)).strip()
    return ProcessedReply(text_for_tts, text_for_ui, True)
