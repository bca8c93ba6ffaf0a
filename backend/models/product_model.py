# backend/models/product_model.py
from datetime import datetime

from sqlalchemy import Column, Integer, Float, Boolean, DateTime, JSON
from sqlalchemy.orm import validates
from sqlalchemy.types import Unicode, UnicodeText

from database.session import Base


class Product(Base):
    __tablename__ = "products"

    id                   = Column(Integer, primary_key=True, index=True)
    name                 = Column(Unicode(255), nullable=False)
    price_per_unit       = Column(Float, nullable=False)
    photo                = Column(Unicode(512), nullable=True)    # URL מ-Cloudinary
    description          = Column(UnicodeText, nullable=False, default="")
    is_special_offer     = Column(Boolean, nullable=False, default=False)
    manufacturer         = Column(Unicode(255), nullable=True, index=True)
    serving_options      = Column(JSON, nullable=False, default=list)   # אפשרויות הגשה/חיתוך
    default_packet_count = Column(Integer, nullable=False, default=0)
    is_active            = Column(Boolean, nullable=False, default=True)
    created_at           = Column(DateTime, nullable=False, default=datetime.now)
    updated_at           = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    @validates("serving_options")
    def _clean_serving_options(self, key, options):
        # נשמר תמיד כרשימת מחרוזות חתוכות ולא ריקות
        return [o.strip() for o in (options or []) if o and o.strip()]

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price_per_unit})>"
