# bakery/models/purchases.py

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from bakery.database import Base


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    supplier_name = Column(String(200), nullable=False)
    party_id = Column(Integer, ForeignKey("parties.id", ondelete="SET NULL"), nullable=True, index=True)

    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(50), nullable=False, default="cash")
    status = Column(String(50), nullable=False, default="pending")
    invoice_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    purchase_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    party = relationship("Party")
    items = relationship(
        "PurchaseItem",
        back_populates="purchase",
        cascade="all, delete-orphan",
    )


class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)

    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = Column(Numeric(12, 4), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    purchase = relationship("Purchase", back_populates="items")
    inventory_item = relationship("InventoryItem")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_purchase_item_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_purchase_item_price_non_negative"),
    )
