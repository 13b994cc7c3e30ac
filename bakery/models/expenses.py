# bakery/models/expenses.py

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.sql import func

from bakery.database import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    # utilities, rent, supplies, supplier_payment, accounts_receivable, ...
    category = Column(String(50), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    description = Column(Text, nullable=True)
    payment_method = Column(String(50), nullable=True)
    vendor = Column(String(200), nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
