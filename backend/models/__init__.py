# backend/models/__init__.py
from .user_model import User
from .product_model import Product
from .order_model import Order, OrderStatus, EDITABLE_STATUSES, can_transition
from .order_item_model import OrderItem
from .admin_setting_model import AdminSetting, GLOBAL_SETTINGS_KEY
