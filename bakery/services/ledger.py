"""
Inventory ledger.

Every stock movement is an append-only InventoryTransaction row holding the
signed delta. InventoryItem.current_stock is a projection of that log and is
only ever changed here, with an atomic `current_stock = current_stock + delta`
update issued in the same database transaction as the ledger insert.
"""

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from bakery.core.config import settings
from bakery.core.errors import InsufficientStockError, InvalidInputError, NotFoundError
from bakery.models.inventory import InventoryItem, InventoryTransaction

logger = logging.getLogger("app")

TRANSACTION_TYPES = ("in", "out", "adjustment")

# Scale of current_stock and InventoryTransaction.quantity
STOCK_QUANTUM = Decimal("0.001")


def get_item_or_404(db: Session, item_id: int, for_update: bool = False) -> InventoryItem:
    query = db.query(InventoryItem).filter(InventoryItem.id == item_id)
    if for_update:
        query = query.with_for_update()

    item = query.first()
    if item is None:
        raise NotFoundError(f"Inventory item {item_id} not found")
    return item


def to_stock_scale(quantity) -> Decimal:
    return Decimal(quantity).quantize(STOCK_QUANTUM, rounding=ROUND_HALF_UP)


def signed_delta(quantity: Decimal, type: str) -> Decimal:
    """Signed stock movement, rounded once to the stock scale."""
    quantity = to_stock_scale(quantity)

    if type not in TRANSACTION_TYPES:
        raise InvalidInputError(f"Unknown transaction type '{type}'")

    if type == "adjustment":
        if quantity == 0:
            raise InvalidInputError("Adjustment quantity cannot be zero")
        return quantity

    if quantity <= 0:
        raise InvalidInputError("Quantity must be greater than zero")

    return quantity if type == "in" else -quantity


def post_transaction(
    db: Session,
    item_id: int,
    quantity: Decimal,
    type: str,
    reason: str | None = None,
    reference: str | None = None,
    user_id: int | None = None,
    negative_stock_policy: str | None = None,
) -> InventoryTransaction:
    """Record a movement and apply it to the item's running stock.

    `in` and `out` take a positive quantity; `adjustment` takes the signed
    correction. Flushes but does not commit: the caller owns the unit of work.
    """
    delta = signed_delta(quantity, type)
    policy = negative_stock_policy or settings.NEGATIVE_STOCK_POLICY
    guarded = delta < 0 and policy == "reject"

    # Row lock so concurrent deductions check against each other's stock
    item = get_item_or_404(db, item_id, for_update=guarded)

    if guarded:
        available = Decimal(item.current_stock or 0)
        if available + delta < 0:
            logger.warning(
                f"Rejected stock movement for item {item.id}: "
                f"available={available} requested={-delta}"
            )
            raise InsufficientStockError(item.name, available, -delta, item.unit)

    transaction = InventoryTransaction(
        inventory_item_id=item.id,
        type=type,
        quantity=delta,
        reason=reason,
        reference=reference,
        created_by_id=user_id,
    )
    db.add(transaction)

    values = {"current_stock": InventoryItem.current_stock + delta}
    if type == "in":
        values["last_restocked"] = datetime.now(timezone.utc)

    db.execute(
        update(InventoryItem)
        .where(InventoryItem.id == item.id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.flush()
    db.refresh(item)

    return transaction


def create_item(db: Session, data: dict, user_id: int | None = None) -> InventoryItem:
    """Create an item; a non-zero opening stock goes through the ledger."""
    opening_stock = Decimal(data.pop("current_stock", 0) or 0)

    item = InventoryItem(current_stock=Decimal("0"), **data)
    db.add(item)
    db.flush()

    if opening_stock != 0:
        post_transaction(
            db,
            item.id,
            opening_stock,
            "adjustment",
            reason="Opening balance",
            user_id=user_id,
            negative_stock_policy="allow",
        )

    return item


def get_low_stock_items(db: Session) -> list[dict]:
    items = (
        db.query(InventoryItem)
        .filter(InventoryItem.current_stock <= InventoryItem.min_level)
        .order_by(InventoryItem.name.asc())
        .all()
    )

    return [
        {
            "id": item.id,
            "name": item.name,
            "current_stock": Decimal(item.current_stock),
            "min_level": Decimal(item.min_level),
            "unit": item.unit,
            "supplier": item.supplier or "Unknown",
            "shortage_amount": Decimal(item.min_level) - Decimal(item.current_stock),
        }
        for item in items
    ]


def list_transactions(db: Session, item_id: int | None = None, limit: int = 100, offset: int = 0) -> list[dict]:
    query = (
        db.query(InventoryTransaction, InventoryItem.name)
        .join(InventoryItem, InventoryTransaction.inventory_item_id == InventoryItem.id)
    )

    if item_id is not None:
        query = query.filter(InventoryTransaction.inventory_item_id == item_id)

    rows = (
        query
        .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )

    return [
        {
            "id": tx.id,
            "inventory_item_id": tx.inventory_item_id,
            "item_name": item_name,
            "type": tx.type,
            "quantity": tx.quantity,
            "reason": tx.reason,
            "reference": tx.reference,
            "created_by_id": tx.created_by_id,
            "created_at": tx.created_at,
        }
        for tx, item_name in rows
    ]


def ledger_balance(db: Session, item_id: int) -> Decimal:
    total = (
        db.query(func.coalesce(func.sum(InventoryTransaction.quantity), 0))
        .filter(InventoryTransaction.inventory_item_id == item_id)
        .scalar()
    )
    return Decimal(str(total or 0))


def reconcile_stock(db: Session, item_id: int) -> dict:
    """Compare the stored running total against the ledger. Read-only."""
    item = get_item_or_404(db, item_id)

    stored = Decimal(item.current_stock or 0)
    ledger = ledger_balance(db, item_id)
    difference = stored - ledger

    if difference != 0:
        logger.warning(
            f"Stock drift on inventory item {item_id}: stored={stored} ledger={ledger}"
        )

    return {
        "inventory_item_id": item.id,
        "stored": stored,
        "ledger": ledger,
        "difference": difference,
        "consistent": difference == 0,
    }
