"""Voice name → vendor voice id lookup for text-to-speech."""

from app.config import settings

VOICE_IDS = {
    # Native Spanish (Spain) voices
    "mateo": "wkuDMN1ptHyPzZcU37bK",   # middle-aged male
    "hugo": "UxLppKk2DHpPKLV59Lwo",    # middle-aged male
    "martin": "ccApat1nZq29MI9bwDPB",  # young adult male
    "julia": "QPyKkS6G2o1razyQb3ks",   # middle-aged female (default)
    "paula": "xCgyYk3lsaZoe5iRHTGb",   # young adult female
    "lucia": "5lyHt3pomylrlAK5VRjm",   # young adult female
    # Legacy ElevenLabs voices
    "matilda": "XrExE9yKIg1WjnnlVkGX",
    "jessica": "cgSgspJ2msm6clMCkdW9",
    "daniel": "onwK4e9ZLuTAKqWW03F9",
    "rachel": "21m00Tcm4TlvDq8ikWAM",
    "antoni": "ErXwobaYiN019PkySvjV",
    "arnold": "VR6AewLTigWG4xSOukaG",
    "bella": "EXAVITQu4vr4xnSDxMaL",
    "elli": "MF3mGyEYCl7XYWbV9V6O",
}


def resolve_voice_id(voice: str | None) -> str:
    """Vendor id for a voice name; unknown or empty names get the default voice."""
    key = (voice or "").strip().lower()
    if key in VOICE_IDS:
        return VOICE_IDS[key]
    return VOICE_IDS[settings.DEFAULT_VOICE.strip().lower()]
