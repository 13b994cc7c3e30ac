"""
Purchases that sync stock.

Each line posts an `in` movement to the ledger and folds the purchase price
into the item's weighted-average cost. The previous stock is read from the
locked row before the movement is applied.
"""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session, selectinload

from bakery.core.errors import InvalidInputError, NotFoundError
from bakery.models.purchases import Purchase, PurchaseItem
from bakery.services import ledger
from bakery.services.accounts import accrue_supplier_balance, get_party_or_404

logger = logging.getLogger("app")


def weighted_average_cost(
    old_stock: Decimal,
    old_cost: Decimal,
    quantity: Decimal,
    unit_price: Decimal,
) -> Decimal:
    """(s0*c0 + q*p) / (s0 + q); stock at or below zero carries no value."""
    old_stock = Decimal(old_stock)
    quantity = Decimal(quantity)
    unit_price = Decimal(unit_price)

    if old_stock <= 0:
        return unit_price

    return (old_stock * Decimal(old_cost) + quantity * unit_price) / (old_stock + quantity)


def create_purchase_with_stock_sync(db: Session, data: dict, user_id: int | None = None) -> Purchase:
    items = data.get("items") or []
    if not items:
        raise InvalidInputError("Purchase must contain items")

    lines = []
    for line in items:
        quantity = ledger.to_stock_scale(line["quantity"])
        if quantity <= 0:
            raise InvalidInputError("Item quantity must be greater than zero")
        if Decimal(line["unit_price"]) < 0:
            raise InvalidInputError("Unit price cannot be negative")
        lines.append({**line, "quantity": quantity})
    items = lines

    party_id = data.get("party_id")
    if party_id is not None:
        get_party_or_404(db, party_id)

    total_amount = sum(
        (Decimal(line["quantity"]) * Decimal(line["unit_price"]) for line in items),
        Decimal("0"),
    )

    purchase = Purchase(
        supplier_name=data["supplier_name"],
        party_id=party_id,
        total_amount=total_amount,
        payment_method=data.get("payment_method") or "cash",
        status=data.get("status") or "pending",
        invoice_number=data.get("invoice_number"),
        notes=data.get("notes"),
        created_by_id=user_id,
    )
    db.add(purchase)
    db.flush()

    for line in items:
        quantity = Decimal(line["quantity"])
        unit_price = Decimal(line["unit_price"])

        item = ledger.get_item_or_404(db, line["inventory_item_id"], for_update=True)
        old_stock = Decimal(item.current_stock or 0)
        old_cost = Decimal(item.cost_per_unit or 0)

        db.add(
            PurchaseItem(
                purchase_id=purchase.id,
                inventory_item_id=item.id,
                quantity=quantity,
                unit_price=unit_price,
                total_price=quantity * unit_price,
            )
        )

        ledger.post_transaction(
            db,
            item.id,
            quantity,
            "in",
            reason=f"Purchase #{purchase.id}",
            reference=str(purchase.id),
            user_id=user_id,
        )

        item.cost_per_unit = weighted_average_cost(old_stock, old_cost, quantity, unit_price)
        db.flush()

    if party_id is not None:
        accrue_supplier_balance(db, party_id, total_amount)

    db.flush()
    db.refresh(purchase)

    logger.info(
        f"Purchase #{purchase.id} recorded: {len(items)} item(s), total {total_amount}"
    )
    return purchase


def list_purchases(db: Session, limit: int = 50, offset: int = 0) -> list[Purchase]:
    return (
        db.query(Purchase)
        .options(selectinload(Purchase.items))
        .order_by(Purchase.purchase_date.desc(), Purchase.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def get_purchase(db: Session, purchase_id: int) -> Purchase:
    purchase = (
        db.query(Purchase)
        .options(selectinload(Purchase.items))
        .filter(Purchase.id == purchase_id)
        .first()
    )
    if purchase is None:
        raise NotFoundError(f"Purchase {purchase_id} not found")
    return purchase
