# backend/models/user_model.py
from datetime import datetime

from sqlalchemy import Column, Integer, Boolean, DateTime
from sqlalchemy.types import Unicode

from database.session import Base


class User(Base):
    __tablename__ = "users"

    id                 = Column(Integer, primary_key=True, index=True)
    name               = Column(Unicode(255), nullable=False)
    phone              = Column(Unicode(20), unique=True, nullable=False, index=True)  # ספרות בלבד
    address_area       = Column(Unicode(64), nullable=False, index=True)
    address_settlement = Column(Unicode(255), nullable=False)
    address_details    = Column(Unicode(512), nullable=False)
    is_admin           = Column(Boolean, nullable=False, default=False)
    password_hash      = Column(Unicode(255), nullable=True)   # רק למנהלים
    created_at         = Column(DateTime, nullable=False, default=datetime.now)
    updated_at         = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    @property
    def address(self) -> dict:
        return {
            "area": self.address_area,
            "settlement": self.address_settlement,
            "details": self.address_details,
        }
