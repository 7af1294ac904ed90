"""Settings router — voice and language preferences."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.user_settings import SettingsResponse, SettingsUpdate
from app.services import storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=SettingsResponse)
def get_settings(db: Session = Depends(get_db)):
    try:
        row = storage.get_settings(db)
    except SQLAlchemyError:
        logger.exception("Error fetching settings")
        raise HTTPException(status_code=500, detail="Failed to fetch settings")
    return SettingsResponse.model_validate(row)


@router.put("", response_model=SettingsResponse)
def update_settings(req: SettingsUpdate, db: Session = Depends(get_db)):
    """Replace all settings; fields left out go back to their defaults."""
    try:
        row = storage.update_settings(db, req.model_dump())
    except SQLAlchemyError:
        logger.exception("Error updating settings")
        raise HTTPException(status_code=500, detail="Failed to update settings")
    return SettingsResponse.model_validate(row)
