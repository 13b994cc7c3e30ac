# =========================================================
# ORDERS ROUTER
#
# Line totals and order totals are computed server-side.
# A completed order placed for a known customer is charged
# to that customer's account.
# =========================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from bakery.database import get_db
from bakery.core.auth import get_current_user
from bakery.core.errors import BakeryError
from bakery.core.rate_limiter import limiter
from bakery.schemas.order import OrderCreate, OrderResponse, OrderStatus, OrderStatusUpdate
from bakery.services import orders as order_service

router = APIRouter(prefix="/api/orders", tags=["Orders"])

logger = logging.getLogger("app")


@router.get("", response_model=list[OrderResponse])
def list_orders(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    order_status: OrderStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    return order_service.list_orders(db, status=order_status, limit=limit, offset=offset)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return order_service.get_order_or_404(db, order_id)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_order(
    request: Request,
    order_data: OrderCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        order = order_service.create_order(db, order_data.model_dump(), user_id=current_user.id)
        db.commit()

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to create order", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create order")

    return order_service.get_order_or_404(db, order.id)


@router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    status_data: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        order_service.update_order_status(db, order_id, status_data.status)
        db.commit()

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to update status of order {order_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update order status")

    return order_service.get_order_or_404(db, order_id)
