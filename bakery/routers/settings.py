# bakery/routers/settings.py

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from bakery.database import get_db
from bakery.core.auth import get_admin_user, get_current_user
from bakery.core.errors import BakeryError
from bakery.schemas.settings import SettingsResponse
from bakery.services import settings as settings_service

router = APIRouter(prefix="/api/settings", tags=["Settings"])

logger = logging.getLogger("app")


def _settings_payload(db: Session) -> dict:
    costing = settings_service.load_costing_settings(db)
    return {
        "values": settings_service.get_all_settings(db),
        "costing": {
            "labor_rate_per_hour": costing.labor_rate_per_hour,
            "overhead_percent": costing.overhead_percent,
            "production_hours": costing.production_hours,
        },
    }


@router.get("", response_model=SettingsResponse)
def get_settings(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return _settings_payload(db)


@router.put("", response_model=SettingsResponse)
def update_settings(
    values: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    admin_user=Depends(get_admin_user),
):
    try:
        settings_service.upsert_settings(db, values)
        db.commit()

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to update settings", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update settings")

    logger.info(f"Settings updated by user {admin_user.id}: {', '.join(sorted(values))}")
    return _settings_payload(db)
