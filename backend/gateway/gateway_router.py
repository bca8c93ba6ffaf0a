# backend/gateway/gateway_router.py
from fastapi import APIRouter

# ראוטרים עסקיים - מאוגדים תחת שער אחד
from routers.users_router import router as auth_router, locations_router
from routers.products_router import router as products_router
from routers.orders_router import router as orders_router
from routers.admin_router import router as admin_router
from routers.settings_router import router as settings_router

gateway_router = APIRouter()

gateway_router.include_router(auth_router)          # /auth/...
gateway_router.include_router(locations_router)     # /locations
gateway_router.include_router(products_router)      # /products/...
gateway_router.include_router(orders_router)        # /orders/...
gateway_router.include_router(admin_router)         # /admin/...
gateway_router.include_router(settings_router)      # /settings/...
