"""
Production costing.

Unit cost of a product is its bill-of-materials valued at current
weighted-average ingredient costs, plus labor at the configured hourly rate
and an overhead percentage applied on top of both.
"""

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from bakery.core.errors import InvalidInputError, NotFoundError
from bakery.models.inventory import InventoryItem
from bakery.models.products import Product, ProductIngredient
from bakery.services.settings import CostingSettings, load_costing_settings

logger = logging.getLogger("app")

MONEY = Decimal("0.01")


@dataclass(frozen=True)
class CostBreakdown:
    material_cost: Decimal
    labor_cost: Decimal
    overhead_cost: Decimal
    total_cost: Decimal
    per_unit_cost: Decimal

    def as_dict(self) -> dict:
        return asdict(self)


def get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def bill_of_materials(db: Session, product_id: int) -> list[tuple[ProductIngredient, InventoryItem]]:
    return (
        db.query(ProductIngredient, InventoryItem)
        .join(InventoryItem, ProductIngredient.inventory_item_id == InventoryItem.id)
        .filter(ProductIngredient.product_id == product_id)
        .order_by(ProductIngredient.id)
        .all()
    )


def calculate_production_cost(
    db: Session,
    product_id: int,
    quantity: Decimal = Decimal("1"),
    costing: CostingSettings | None = None,
) -> CostBreakdown:
    quantity = Decimal(quantity)
    if quantity <= 0:
        raise InvalidInputError("Quantity must be greater than zero")

    get_product_or_404(db, product_id)
    costing = costing or load_costing_settings(db)

    material_per_unit = sum(
        (Decimal(ingredient.quantity) * Decimal(item.cost_per_unit) for ingredient, item in bill_of_materials(db, product_id)),
        Decimal("0"),
    )
    material_cost = material_per_unit * quantity

    # Labor hours are per unit produced
    labor_cost = costing.labor_rate_per_hour * costing.production_hours * quantity

    overhead_cost = (material_cost + labor_cost) * costing.overhead_percent / Decimal("100")

    total_cost = material_cost + labor_cost + overhead_cost

    return CostBreakdown(
        material_cost=material_cost,
        labor_cost=labor_cost,
        overhead_cost=overhead_cost,
        total_cost=total_cost,
        per_unit_cost=total_cost / quantity,
    )


def compute_margin(price: Decimal, cost: Decimal) -> Decimal:
    price = Decimal(price or 0)
    if price == 0:
        return Decimal("0.00")
    return ((price - Decimal(cost)) / price * 100).quantize(MONEY)


def update_product_cost_from_calculation(db: Session, product_id: int) -> Product:
    """Store the unit production cost on the product and refresh its margin."""
    breakdown = calculate_production_cost(db, product_id, Decimal("1"))
    product = get_product_or_404(db, product_id)

    product.cost = breakdown.per_unit_cost.quantize(MONEY)
    product.margin = compute_margin(product.price, product.cost)
    db.flush()

    logger.info(
        f"Product {product.id} cost updated to {product.cost} (margin {product.margin}%)"
    )
    return product


def ingredient_requirements(db: Session, product_id: int, quantity: Decimal) -> list[dict]:
    """Advisory stock check for a batch; never blocks anything."""
    quantity = Decimal(quantity)

    requirements = []
    for ingredient, item in bill_of_materials(db, product_id):
        required = Decimal(ingredient.quantity) * quantity
        available = Decimal(item.current_stock)
        requirements.append(
            {
                "inventory_item_id": item.id,
                "item_name": item.name,
                "required_quantity": required,
                "available_stock": available,
                "unit": ingredient.unit or item.unit,
                "sufficient": available >= required,
            }
        )
    return requirements
