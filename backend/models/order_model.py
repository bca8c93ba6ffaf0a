# backend/models/order_model.py
import enum
from datetime import datetime

from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, Index
from sqlalchemy.types import Unicode, UnicodeText
from sqlalchemy.orm import relationship

from database.session import Base


class OrderStatus(str, enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PROCESSING = "Processing"
    READY = "Ready"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @classmethod
    def values(cls):
        return [s.value for s in cls]


# לקוח יכול לערוך פריטים/כתובת/הערה רק בסטטוסים האלה
EDITABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})

# מכונת מצבים שטוחה: כל סטטוס יכול לעבור לכל סטטוס (כולל לעצמו), אין מצב סופי נעול
STATUS_TRANSITIONS = {s: frozenset(OrderStatus) for s in OrderStatus}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return OrderStatus(new) in STATUS_TRANSITIONS[OrderStatus(current)]


class Order(Base):
    __tablename__ = "orders"

    id                = Column(Integer, primary_key=True, index=True)
    user_id           = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_name         = Column(Unicode(255), nullable=False)    # נשמר בזמן ההזמנה
    user_phone        = Column(Unicode(20), nullable=False)     # נשמר בזמן ההזמנה
    delivery_address  = Column(Unicode(512), nullable=False)
    total_price       = Column(Float, nullable=False)
    order_date        = Column(DateTime, nullable=False, default=datetime.now)
    modification_date = Column(DateTime, nullable=True)         # None עד העריכה הראשונה
    completion_date   = Column(DateTime, nullable=False)
    status            = Column(Unicode(20), nullable=False, default=OrderStatus.PENDING.value)
    note              = Column(UnicodeText, nullable=True)
    created_at        = Column(DateTime, nullable=False, default=datetime.now)
    updated_at        = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    user  = relationship("User")
    items = relationship(
        "OrderItem",
        cascade="all, delete-orphan",
        back_populates="order",
        order_by="OrderItem.position",
    )

    __table_args__ = (
        Index("ix_orders_status_completion", "status", "completion_date"),
    )

    def __repr__(self):
        return f"<Order(id={self.id}, user_id={self.user_id}, total={self.total_price}, status='{self.status}')>"
