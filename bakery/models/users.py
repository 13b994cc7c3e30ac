# bakery/models/users.py

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.sql import func

from bakery.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    full_name = Column(String(200), nullable=True)

    # Admins manage users and costing settings
    is_admin = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
