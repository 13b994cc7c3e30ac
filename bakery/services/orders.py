"""Sales orders. Totals are always computed here, never trusted from the client."""

import logging
import secrets
import time
from decimal import Decimal

from sqlalchemy.orm import Session, selectinload

from bakery.core.errors import ConcurrencyConflictError, InvalidInputError, NotFoundError
from bakery.models.order_items import OrderItem
from bakery.models.orders import Order
from bakery.services.accounts import debit_customer, get_customer_or_404
from bakery.services.costing import get_product_or_404

logger = logging.getLogger("app")


def generate_order_number() -> str:
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


def get_order_or_404(db: Session, order_id: int) -> Order:
    order = (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.id == order_id)
        .first()
    )
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def list_orders(db: Session, status: str | None = None, limit: int = 50, offset: int = 0) -> list[Order]:
    query = db.query(Order).options(selectinload(Order.items))
    if status:
        query = query.filter(Order.status == status)
    return (
        query.order_by(Order.order_date.desc(), Order.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def _charge_customer(db: Session, order: Order) -> None:
    if order.customer_id is not None and order.total_amount > 0:
        debit_customer(db, order.customer_id, order.total_amount)
        logger.info(f"Order {order.order_number} charged {order.total_amount} to customer {order.customer_id}")


def create_order(db: Session, data: dict, user_id: int | None = None) -> Order:
    items = data.get("items") or []
    if not items:
        raise InvalidInputError("Order must contain items")

    customer_name = data.get("customer_name")
    customer_id = data.get("customer_id")
    if customer_id is not None:
        customer = get_customer_or_404(db, customer_id)
        customer_name = customer_name or customer.name
    if not customer_name:
        raise InvalidInputError("Customer name is required")

    lines = []
    total_amount = Decimal("0")
    for line in items:
        quantity = int(line["quantity"])
        if quantity <= 0:
            raise InvalidInputError("Item quantity must be greater than zero")

        product = get_product_or_404(db, line["product_id"])
        unit_price = line.get("unit_price")
        unit_price = Decimal(product.price) if unit_price is None else Decimal(unit_price)

        line_total = unit_price * quantity
        total_amount += line_total
        lines.append(
            OrderItem(
                product_id=product.id,
                quantity=quantity,
                unit_price=unit_price,
                total_price=line_total,
            )
        )

    order = Order(
        order_number=generate_order_number(),
        customer_id=customer_id,
        customer_name=customer_name,
        status=data.get("status") or "pending",
        payment_method=data.get("payment_method") or "cash",
        total_amount=total_amount,
        due_date=data.get("due_date"),
        notes=data.get("notes"),
        created_by_id=user_id,
        items=lines,
    )
    db.add(order)
    db.flush()

    if order.status == "completed":
        _charge_customer(db, order)

    db.refresh(order)
    return order


def update_order_status(db: Session, order_id: int, new_status: str) -> Order:
    order = get_order_or_404(db, order_id)

    if order.status == new_status:
        return order
    if order.status in ("completed", "cancelled"):
        raise ConcurrencyConflictError(f"Order {order.order_number} is already {order.status}")

    order.status = new_status
    db.flush()

    if new_status == "completed":
        _charge_customer(db, order)

    db.refresh(order)
    return order
