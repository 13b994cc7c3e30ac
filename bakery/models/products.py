# bakery/models/products.py

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from bakery.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    price = Column(Numeric(10, 2), nullable=False)
    # Unit production cost, refreshed from the costing engine on demand
    cost = Column(Numeric(10, 2), nullable=False, default=0)
    margin = Column(Numeric(7, 2), nullable=False, default=0)

    sku = Column(String(50), unique=True, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="products")
    ingredients = relationship(
        "ProductIngredient",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductIngredient.id",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
    )


class ProductIngredient(Base):
    """Bill-of-materials edge: how much of an inventory item one unit of product needs."""

    __tablename__ = "product_ingredients"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)

    quantity = Column(Numeric(10, 4), nullable=False)
    unit = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    product = relationship("Product", back_populates="ingredients")
    inventory_item = relationship("InventoryItem")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_ingredient_quantity_positive"),
    )
