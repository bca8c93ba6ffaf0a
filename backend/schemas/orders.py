# backend/schemas/orders.py
from typing import Any, List, Optional
from datetime import datetime

from pydantic import BaseModel, Field

from models.order_model import Order


class OrderItemIn(BaseModel):
    productId: int
    quantity: int
    selectedServingOption: Optional[str] = None
    packetCount: Optional[Any] = None   # מספר שלם חיובי או None; ערך לא תקין הופך ל-None


class OrderCreate(BaseModel):
    products: List[OrderItemIn] = Field(default_factory=list)
    deliveryAddress: Optional[str] = None
    note: Optional[str] = None


class OrderUpdate(BaseModel):
    products: List[OrderItemIn]          # כמות 0 = הסרת הפריט
    deliveryAddress: Optional[str] = None
    note: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None


class OrderItemResponse(BaseModel):
    productId: int
    name: str
    quantity: int
    priceAtOrder: float
    selectedServingOption: Optional[str] = None
    manufacturer: Optional[str] = None
    packetCount: Optional[int] = None


class OrderResponse(BaseModel):
    id: int
    userId: int
    userName: str
    userPhone: str
    deliveryAddress: str
    products: List[OrderItemResponse] = []
    totalPrice: float
    orderDate: datetime
    modificationDate: Optional[datetime] = None
    completionDate: datetime
    status: str
    note: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_order(cls, o: Order) -> "OrderResponse":
        return cls(
            id=o.id,
            userId=o.user_id,
            userName=o.user_name,
            userPhone=o.user_phone,
            deliveryAddress=o.delivery_address,
            products=[
                OrderItemResponse(
                    productId=it.product_id,
                    name=it.name,
                    quantity=it.quantity,
                    priceAtOrder=it.price_at_order,
                    selectedServingOption=it.selected_serving_option,
                    manufacturer=it.manufacturer,
                    packetCount=it.packet_count,
                )
                for it in o.items
            ],
            totalPrice=o.total_price,
            orderDate=o.order_date,
            modificationDate=o.modification_date,
            completionDate=o.completion_date,
            status=o.status,
            note=o.note,
            createdAt=o.created_at,
            updatedAt=o.updated_at,
        )


class OrdersPage(BaseModel):
    orders: List[OrderResponse]
    currentPage: int
    totalPages: int
    totalOrders: int


class ProductBuyer(BaseModel):
    orderId: int
    userId: int
    userName: str
    userPhone: str
    quantity: int
    orderDate: datetime
    completionDate: datetime


class ProductSummary(BaseModel):
    productId: int
    productName: str
    manufacturer: Optional[str] = None
    totalQuantity: int
    users: List[ProductBuyer]
