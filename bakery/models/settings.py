# bakery/models/settings.py

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from bakery.database import Base


class Setting(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False)
    value = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, default="string")  # string | number | boolean | json

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
