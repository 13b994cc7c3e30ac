"""Production scheduling and processing of completed runs."""

import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from sqlalchemy.orm import Session, joinedload

from bakery.core.errors import ConcurrencyConflictError, InvalidInputError, NotFoundError
from bakery.models.production import ProductionScheduleItem
from bakery.services import ledger
from bakery.services.costing import (
    bill_of_materials,
    calculate_production_cost,
    get_product_or_404,
    ingredient_requirements,
)

logger = logging.getLogger("app")

CLOSED_STATUSES = ("completed", "cancelled")


def get_schedule_item_or_404(db: Session, production_id: int, for_update: bool = False) -> ProductionScheduleItem:
    query = (
        db.query(ProductionScheduleItem)
        .options(joinedload(ProductionScheduleItem.product))
        .filter(ProductionScheduleItem.id == production_id)
    )
    if for_update:
        query = query.with_for_update(of=ProductionScheduleItem)

    schedule = query.first()
    if schedule is None:
        raise NotFoundError("Production schedule not found")
    return schedule


def serialize_schedule(schedule: ProductionScheduleItem) -> dict:
    return {
        "id": schedule.id,
        "product_id": schedule.product_id,
        "product_name": schedule.product.name if schedule.product else "",
        "quantity": schedule.quantity,
        "actual_quantity": schedule.actual_quantity,
        "scheduled_date": schedule.scheduled_date,
        "start_time": schedule.start_time,
        "end_time": schedule.end_time,
        "priority": schedule.priority,
        "status": schedule.status,
        "assigned_to_id": schedule.assigned_to_id,
        "notes": schedule.notes,
        "completed_at": schedule.completed_at,
    }


def list_schedule(db: Session, day: date | None = None) -> list[ProductionScheduleItem]:
    query = db.query(ProductionScheduleItem).options(joinedload(ProductionScheduleItem.product))

    if day is not None:
        start_dt = datetime.combine(day, time.min)
        query = query.filter(
            ProductionScheduleItem.scheduled_date >= start_dt,
            ProductionScheduleItem.scheduled_date < start_dt + timedelta(days=1),
        )

    return query.order_by(ProductionScheduleItem.scheduled_date.asc(), ProductionScheduleItem.id.asc()).all()


def create_schedule_with_cost_tracking(db: Session, data: dict) -> dict:
    get_product_or_404(db, data["product_id"])
    quantity = Decimal(data["quantity"])

    cost_breakdown = calculate_production_cost(db, data["product_id"], quantity)
    requirements = ingredient_requirements(db, data["product_id"], quantity)

    schedule = ProductionScheduleItem(**data, status="scheduled")
    db.add(schedule)
    db.flush()
    db.refresh(schedule)

    short = [r["item_name"] for r in requirements if not r["sufficient"]]
    if short:
        logger.warning(
            f"Production #{schedule.id} scheduled with insufficient stock for: {', '.join(short)}"
        )

    return {
        "schedule": serialize_schedule(schedule),
        "cost_breakdown": cost_breakdown.as_dict(),
        "ingredient_requirements": requirements,
    }


def update_schedule_item(db: Session, production_id: int, data: dict) -> ProductionScheduleItem:
    schedule = get_schedule_item_or_404(db, production_id)

    if schedule.status in CLOSED_STATUSES:
        raise ConcurrencyConflictError(f"Production #{production_id} is already {schedule.status}")

    if data.get("status") == "completed":
        raise InvalidInputError("Use the process endpoint to complete a production run")

    for field, value in data.items():
        setattr(schedule, field, value)

    db.flush()
    db.refresh(schedule)
    return schedule


def delete_schedule_item(db: Session, production_id: int) -> None:
    schedule = get_schedule_item_or_404(db, production_id)

    if schedule.status == "completed":
        raise ConcurrencyConflictError("Completed production runs cannot be deleted")

    db.delete(schedule)
    db.flush()


def process_production(
    db: Session,
    production_id: int,
    actual_quantity: Decimal,
    user_id: int | None = None,
) -> ProductionScheduleItem:
    """Deduct every ingredient for `actual_quantity` units and close the run.

    A run can only be processed once; the schedule row is locked so two
    concurrent requests cannot both deduct.
    """
    schedule = get_schedule_item_or_404(db, production_id, for_update=True)

    if schedule.status == "completed":
        raise ConcurrencyConflictError(f"Production #{production_id} has already been processed")
    if schedule.status == "cancelled":
        raise ConcurrencyConflictError(f"Production #{production_id} was cancelled")

    actual_quantity = Decimal(actual_quantity)
    if actual_quantity <= 0:
        raise InvalidInputError("Actual quantity must be greater than zero")

    for ingredient, item in bill_of_materials(db, schedule.product_id):
        used_quantity = ledger.to_stock_scale(Decimal(ingredient.quantity) * actual_quantity)
        if used_quantity == 0:
            continue

        ledger.post_transaction(
            db,
            item.id,
            used_quantity,
            "out",
            reason=f"Production #{schedule.id}",
            reference=str(schedule.id),
            user_id=user_id,
        )

    schedule.status = "completed"
    schedule.actual_quantity = actual_quantity
    schedule.completed_at = datetime.now(timezone.utc)
    db.flush()

    logger.info(f"Production #{schedule.id} processed: {actual_quantity} unit(s) of product {schedule.product_id}")
    return schedule
