# =========================================================
# PURCHASES ROUTER
#
# Purchases are only created through /with-stock-sync so
# that every purchased line lands in the inventory ledger
# and the weighted-average cost.
# =========================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from bakery.database import get_db
from bakery.core.auth import get_current_user
from bakery.core.errors import BakeryError
from bakery.core.rate_limiter import limiter
from bakery.schemas.purchase import PurchaseCreate, PurchaseResponse
from bakery.services import purchases as purchase_service

router = APIRouter(prefix="/api/purchases", tags=["Purchases"])

logger = logging.getLogger("app")


# =========================================================
# CREATE PURCHASE WITH STOCK SYNC
# =========================================================
@router.post("/with-stock-sync", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_purchase_with_stock_sync(
    request: Request,
    purchase_data: PurchaseCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        purchase = purchase_service.create_purchase_with_stock_sync(
            db,
            purchase_data.model_dump(),
            user_id=current_user.id,
        )
        db.commit()

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to create purchase with stock sync", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create purchase")

    return purchase_service.get_purchase(db, purchase.id)


# =========================================================
# LIST / GET
# =========================================================
@router.get("", response_model=list[PurchaseResponse])
def list_purchases(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    return purchase_service.list_purchases(db, limit=limit, offset=offset)


@router.get("/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(
    purchase_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return purchase_service.get_purchase(db, purchase_id)
