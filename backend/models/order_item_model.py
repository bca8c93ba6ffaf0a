# backend/models/order_item_model.py
from sqlalchemy import Column, Integer, Float, ForeignKey, CheckConstraint
from sqlalchemy.types import Unicode
from sqlalchemy.orm import relationship

from database.session import Base


class OrderItem(Base):
    """שורת הזמנה - צילום של המוצר ברגע הכתיבה (ללא FK למוצרים)"""
    __tablename__ = "order_items"

    id                      = Column(Integer, primary_key=True, index=True)
    order_id                = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position                = Column(Integer, nullable=False, default=0)
    product_id              = Column(Integer, nullable=False, index=True)
    name                    = Column(Unicode(255), nullable=False)
    quantity                = Column(Integer, nullable=False)
    price_at_order          = Column(Float, nullable=False)
    selected_serving_option = Column(Unicode(255), nullable=True)
    manufacturer            = Column(Unicode(255), nullable=True)
    packet_count            = Column(Integer, nullable=True)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
        CheckConstraint("packet_count IS NULL OR packet_count >= 1", name="ck_order_items_packet_count"),
    )

    @property
    def line_total(self) -> float:
        return self.price_at_order * self.quantity
