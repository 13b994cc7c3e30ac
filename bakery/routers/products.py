# bakery/routers/products.py

from decimal import Decimal
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import SQLAlchemyError

from bakery.database import get_db
from bakery.core.auth import get_current_user
from bakery.core.errors import BakeryError
from bakery.models.order_items import OrderItem
from bakery.models.production import ProductionScheduleItem
from bakery.models.products import Product, ProductIngredient
from bakery.schemas.common import MessageResponse
from bakery.schemas.product import (
    CostBreakdownResponse,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)
from bakery.services import costing, ledger

router = APIRouter(
    prefix="/api/products",
    tags=["Products"],
)

logger = logging.getLogger("app")


def _serialize_product(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "category_id": product.category_id,
        "price": product.price,
        "cost": product.cost,
        "margin": product.margin,
        "sku": product.sku,
        "is_active": product.is_active,
        "created_at": product.created_at,
        "ingredients": [
            {
                "id": ingredient.id,
                "inventory_item_id": ingredient.inventory_item_id,
                "item_name": ingredient.inventory_item.name,
                "quantity": ingredient.quantity,
                "unit": ingredient.unit or ingredient.inventory_item.unit,
                "cost_per_unit": ingredient.inventory_item.cost_per_unit,
            }
            for ingredient in product.ingredients
        ],
    }


def _load_product(db: Session, product_id: int) -> Product:
    product = (
        db.query(Product)
        .options(selectinload(Product.ingredients).selectinload(ProductIngredient.inventory_item))
        .filter(Product.id == product_id)
        .first()
    )

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )
    return product


def _build_ingredients(db: Session, ingredients) -> list[ProductIngredient]:
    item_ids = [i.inventory_item_id for i in ingredients]
    if len(item_ids) != len(set(item_ids)):
        raise HTTPException(status_code=400, detail="Duplicate ingredients are not allowed")

    rows = []
    for ingredient in ingredients:
        item = ledger.get_item_or_404(db, ingredient.inventory_item_id)
        rows.append(
            ProductIngredient(
                inventory_item_id=item.id,
                quantity=ingredient.quantity,
                unit=ingredient.unit or item.unit,
            )
        )
    return rows


# =========================================================
# CATALOG
# =========================================================
@router.get("", response_model=list[ProductResponse])
def list_products(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    active_only: bool = Query(False),
):
    query = db.query(Product).options(
        selectinload(Product.ingredients).selectinload(ProductIngredient.inventory_item)
    )
    if active_only:
        query = query.filter(Product.is_active.is_(True))

    return [_serialize_product(p) for p in query.order_by(Product.name.asc()).all()]


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return _serialize_product(_load_product(db, product_id))


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    if product_data.sku and db.query(Product).filter(Product.sku == product_data.sku).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product with this SKU already exists",
        )

    try:
        product = Product(
            name=product_data.name,
            description=product_data.description,
            category_id=product_data.category_id,
            price=product_data.price,
            cost=Decimal("0"),
            margin=costing.compute_margin(product_data.price, Decimal("0")),
            sku=product_data.sku,
            is_active=product_data.is_active,
            ingredients=_build_ingredients(db, product_data.ingredients),
        )
        db.add(product)
        db.commit()

    except (HTTPException, BakeryError):
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to create product", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create product")

    return _serialize_product(_load_product(db, product.id))


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    product = _load_product(db, product_id)
    changes = product_data.model_dump(exclude_unset=True, exclude={"ingredients"})

    if changes.get("sku") and changes["sku"] != product.sku:
        if db.query(Product).filter(Product.sku == changes["sku"]).first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Product with this SKU already exists",
            )

    try:
        for field, value in changes.items():
            setattr(product, field, value)

        if "price" in changes:
            product.margin = costing.compute_margin(product.price, product.cost)

        # A provided list replaces the whole bill of materials
        if product_data.ingredients is not None:
            product.ingredients = _build_ingredients(db, product_data.ingredients)

        db.commit()

    except (HTTPException, BakeryError):
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to update product {product_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update product")

    return _serialize_product(_load_product(db, product_id))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    product = _load_product(db, product_id)

    in_use = (
        db.query(OrderItem.id).filter(OrderItem.product_id == product_id).first()
        or db.query(ProductionScheduleItem.id).filter(ProductionScheduleItem.product_id == product_id).first()
    )
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product is referenced by orders or production runs; deactivate it instead",
        )

    try:
        db.delete(product)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to delete product {product_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete product")


# =========================================================
# COSTING
# =========================================================
@router.get("/{product_id}/cost-calculation", response_model=CostBreakdownResponse)
def get_cost_calculation(
    product_id: int,
    quantity: Decimal = Query(Decimal("1")),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    breakdown = costing.calculate_production_cost(db, product_id, quantity)
    return breakdown.as_dict()


@router.put("/{product_id}/update-cost", response_model=MessageResponse)
def update_cost(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        product = costing.update_product_cost_from_calculation(db, product_id)
        db.commit()

    except BakeryError:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to update cost for product {product_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update product cost")

    return {"success": True, "message": f"Product cost updated to {product.cost}"}
