# bakery/models/production.py

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from bakery.database import Base


class ProductionScheduleItem(Base):
    __tablename__ = "production_schedule"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    actual_quantity = Column(Numeric(12, 3), nullable=True)

    scheduled_date = Column(DateTime(timezone=True), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)

    priority = Column(String(20), nullable=False, default="medium")
    # scheduled | in_progress | completed | delayed | cancelled
    status = Column(String(50), nullable=False, default="scheduled")

    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product")
    assigned_to = relationship("User")

    __table_args__ = (
        Index("ix_production_schedule_date_status", "scheduled_date", "status"),
        CheckConstraint("quantity > 0", name="ck_production_quantity_positive"),
    )
