# =========================================================
# PRODUCTION SCHEDULE ROUTER
#
# A run is planned with its cost breakdown, then processed
# exactly once to deduct ingredients from inventory.
# =========================================================

from datetime import date
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from bakery.database import get_db
from bakery.core.auth import get_current_user
from bakery.core.errors import BakeryError
from bakery.schemas.common import MessageResponse
from bakery.schemas.production import (
    ProcessProductionRequest,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
    ScheduleWithCostResponse,
)
from bakery.services import production as production_service

router = APIRouter(prefix="/api/production-schedule", tags=["Production"])

logger = logging.getLogger("app")


@router.get("", response_model=list[ScheduleResponse])
def list_schedule(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    day: date | None = Query(None, alias="date"),
):
    return [
        production_service.serialize_schedule(s)
        for s in production_service.list_schedule(db, day)
    ]


@router.post("", response_model=ScheduleWithCostResponse, status_code=status.HTTP_201_CREATED)
@router.post("/with-cost-tracking", response_model=ScheduleWithCostResponse, status_code=status.HTTP_201_CREATED)
def create_with_cost_tracking(
    schedule_data: ScheduleCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        result = production_service.create_schedule_with_cost_tracking(db, schedule_data.model_dump())
        db.commit()

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to create production schedule", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create production schedule")

    return result


@router.put("/{production_id}", response_model=ScheduleResponse)
def update_schedule(
    production_id: int,
    schedule_data: ScheduleUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        schedule = production_service.update_schedule_item(
            db,
            production_id,
            schedule_data.model_dump(exclude_unset=True),
        )
        db.commit()

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to update production #{production_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update production schedule")

    return production_service.serialize_schedule(schedule)


@router.delete("/{production_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    production_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        production_service.delete_schedule_item(db, production_id)
        db.commit()

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to delete production #{production_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete production schedule")


# =========================================================
# PROCESS (DEDUCT INGREDIENTS)
# =========================================================
@router.post("/{production_id}/process", response_model=MessageResponse)
def process_production(
    production_id: int,
    process_data: ProcessProductionRequest,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        production_service.process_production(
            db,
            production_id,
            process_data.actual_quantity,
            user_id=current_user.id,
        )
        db.commit()

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to process production #{production_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process production")

    return {
        "success": True,
        "message": "Production processed and inventory updated successfully",
    }
