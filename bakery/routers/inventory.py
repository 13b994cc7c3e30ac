# bakery/routers/inventory.py

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from bakery.database import get_db
from bakery.core.auth import get_current_user
from bakery.core.errors import BakeryError
from bakery.models.inventory import InventoryItem, InventoryTransaction
from bakery.models.products import ProductIngredient
from bakery.models.purchases import PurchaseItem
from bakery.schemas.common import MessageResponse
from bakery.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryItemResponse,
    InventoryTransactionCreate,
    InventoryTransactionResponse,
    LowStockItemResponse,
    StockReconciliationResponse,
)
from bakery.services import ledger

router = APIRouter(
    prefix="/api/inventory",
    tags=["Inventory"],
)

logger = logging.getLogger("app")


# =========================================================
# STATIC ROUTES (must come before /{item_id})
# =========================================================
@router.get("/low-stock", response_model=list[LowStockItemResponse])
def low_stock(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger.get_low_stock_items(db)


@router.get("/transactions", response_model=list[InventoryTransactionResponse])
def list_transactions(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    item_id: int | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    return ledger.list_transactions(db, item_id=item_id, limit=limit, offset=offset)


# =========================================================
# ITEMS
# =========================================================
@router.get("", response_model=list[InventoryItemResponse])
def list_items(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return db.query(InventoryItem).order_by(InventoryItem.name.asc()).all()


@router.post("", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    item_data: InventoryItemCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        item = ledger.create_item(db, item_data.model_dump(), user_id=current_user.id)
        db.commit()
        db.refresh(item)

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to create inventory item", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create inventory item")

    return item


@router.get("/{item_id}", response_model=InventoryItemResponse)
def get_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger.get_item_or_404(db, item_id)


@router.put("/{item_id}", response_model=InventoryItemResponse)
def update_item(
    item_id: int,
    item_data: InventoryItemUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    item = ledger.get_item_or_404(db, item_id)

    try:
        # Stock is never edited directly; it only moves through transactions
        for field, value in item_data.model_dump(exclude_unset=True).items():
            setattr(item, field, value)

        db.commit()
        db.refresh(item)

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to update inventory item {item_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update inventory item")

    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    item = ledger.get_item_or_404(db, item_id)

    in_use = (
        db.query(ProductIngredient.id).filter(ProductIngredient.inventory_item_id == item_id).first()
        or db.query(PurchaseItem.id).filter(PurchaseItem.inventory_item_id == item_id).first()
    )
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Inventory item is used by products or purchases",
        )

    try:
        db.query(InventoryTransaction).filter(
            InventoryTransaction.inventory_item_id == item_id
        ).delete(synchronize_session=False)
        db.delete(item)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to delete inventory item {item_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete inventory item")


# =========================================================
# STOCK MOVEMENTS
# =========================================================
@router.post("/{item_id}/transaction", response_model=MessageResponse)
def create_transaction(
    item_id: int,
    transaction_data: InventoryTransactionCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        ledger.post_transaction(
            db,
            item_id,
            transaction_data.quantity,
            transaction_data.type,
            reason=transaction_data.reason,
            reference=transaction_data.reference,
            user_id=current_user.id,
        )
        db.commit()

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to record transaction for item {item_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to record inventory transaction")

    return {"success": True, "message": "Inventory transaction recorded"}


@router.get("/{item_id}/transactions", response_model=list[InventoryTransactionResponse])
def item_transactions(
    item_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    ledger.get_item_or_404(db, item_id)
    return ledger.list_transactions(db, item_id=item_id, limit=limit, offset=offset)


@router.get("/{item_id}/reconcile", response_model=StockReconciliationResponse)
def reconcile(
    item_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger.reconcile_stock(db, item_id)
