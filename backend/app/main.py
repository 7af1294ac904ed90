"""Voice agent chat — FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.database import engine, Base
from app.middleware.errors import register_exception_handlers
from app.middleware.rate_limit import limiter
from app.routers import agent, conversations, speech, user_settings
from app.services.agent_client import agent_client
from app.services.salesforce import token_provider
from app.services.speech_client import speech_client
from app import models  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create all tables on startup
Base.metadata.create_all(bind=engine)


def vendor_status() -> str:
    if token_provider.is_configured() and settings.AGENT_ID:
        return "configured"
    if token_provider.is_configured():
        return "speech-only"
    return "unconfigured"


@asynccontextmanager
async def lifespan(app: FastAPI):
    status = vendor_status()
    if status == "unconfigured":
        logger.warning(
            "Vendor APIs not configured. Set SF_MY_DOMAIN_URL, SF_CLIENT_ID, "
            "SF_CLIENT_SECRET and AGENT_ID in backend/.env and restart."
        )
    else:
        logger.info("Vendor APIs: %s (agent %s)", status, settings.AGENT_ID or "-")
    yield
    await agent_client.aclose()
    await speech_client.aclose()
    await token_provider.aclose()


_cors_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]

app = FastAPI(
    title="Voice Agent Chat",
    description="Voice chat with a conversational agent: speech-to-text, text-to-speech and history.",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

register_exception_handlers(app)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(conversations.router)
app.include_router(speech.router)
app.include_router(agent.router)
app.include_router(user_settings.router)


@app.get("/health")
def health():
    return {"status": "ok", "vendors": vendor_status()}
