# backend/schemas/__init__.py

# products
from .products import ProductOut, ProductDeleted

# users
from .users import (
    Address, RegisterPayload, RegisterResponse, LoginPayload, LoginResponse,
    AdminPasswordPayload, AdminLoginRequired, UserOut,
)

# orders
from .orders import (
    OrderCreate, OrderUpdate, OrderResponse, OrderItemIn, OrderItemResponse,
    OrderStatusUpdate, OrdersPage, ProductSummary,
)

# settings
from .settings import CompletionDateOut, CompletionDateUpdate, CompletionDateUpdated

__all__ = [
    # products
    "ProductOut", "ProductDeleted",
    # users
    "Address", "RegisterPayload", "RegisterResponse", "LoginPayload", "LoginResponse",
    "AdminPasswordPayload", "AdminLoginRequired", "UserOut",
    # orders
    "OrderCreate", "OrderUpdate", "OrderResponse", "OrderItemIn", "OrderItemResponse",
    "OrderStatusUpdate", "OrdersPage", "ProductSummary",
    # settings
    "CompletionDateOut", "CompletionDateUpdate", "CompletionDateUpdated",
]
