# bakery/models/inventory.py

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from bakery.database import Base


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)

    # Running total of the transaction ledger, maintained in the same DB transaction
    current_stock = Column(Numeric(12, 3), nullable=False, default=0)
    min_level = Column(Numeric(12, 3), nullable=False, default=0)
    unit = Column(String(50), nullable=False)

    # Weighted-average cost
    cost_per_unit = Column(Numeric(12, 4), nullable=False, default=0)

    supplier = Column(String(200), nullable=True)
    company = Column(String(200), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    last_restocked = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    transactions = relationship(
        "InventoryTransaction",
        back_populates="inventory_item",
        order_by="InventoryTransaction.id",
    )

    __table_args__ = (
        CheckConstraint("min_level >= 0", name="ck_inventory_min_level_non_negative"),
        CheckConstraint("cost_per_unit >= 0", name="ck_inventory_cost_non_negative"),
    )


class InventoryTransaction(Base):
    """Append-only stock movement. `quantity` is the signed delta applied to current_stock."""

    __tablename__ = "inventory_transactions"

    id = Column(Integer, primary_key=True, index=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)

    type = Column(String(20), nullable=False)  # in | out | adjustment
    quantity = Column(Numeric(12, 3), nullable=False)
    reason = Column(String(200), nullable=True)
    reference = Column(String(100), nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    inventory_item = relationship("InventoryItem", back_populates="transactions")

    __table_args__ = (
        Index("ix_inventory_transactions_item_created", "inventory_item_id", "created_at"),
        CheckConstraint("type IN ('in', 'out', 'adjustment')", name="ck_inventory_transaction_type"),
    )
