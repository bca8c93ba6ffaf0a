# backend/routers/admin_router.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.orm import Session

from config.settings import get_settings
from database.session import get_db
from routers.dependencies import require_admin, get_order_engine
from schemas.orders import OrderResponse, OrderStatusUpdate, OrdersPage, ProductSummary
from schemas.settings import CompletionDateOut, CompletionDateUpdate, CompletionDateUpdated
from services.auth_service import AdminAccount
from services.export_service import orders_to_csv, export_filename
from services.order_service import OrderEngine
from services.reporting_service import (
    DEFAULT_SORT,
    DEFAULT_SUMMARY_STATUS,
    OrderFilters,
    OrderReporting,
    parse_date_param,
)
from services.settings_service import SettingsStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _filters(
    status: Optional[str] = None,
    orderDateStart: Optional[str] = None,
    orderDateEnd: Optional[str] = None,
    completionDateStart: Optional[str] = None,
    completionDateEnd: Optional[str] = None,
    manufacturer: Optional[str] = None,
    userArea: Optional[str] = None,
    userSettlement: Optional[str] = None,
) -> OrderFilters:
    return OrderFilters.from_query(
        status=status,
        orderDateStart=orderDateStart,
        orderDateEnd=orderDateEnd,
        completionDateStart=completionDateStart,
        completionDateEnd=completionDateEnd,
        manufacturer=manufacturer,
        userArea=userArea,
        userSettlement=userSettlement,
    )


# ---------- ניהול הזמנות ----------

@router.get("/orders", response_model=OrdersPage)
def list_orders(
    _: AdminAccount = Depends(require_admin),
    filters: OrderFilters = Depends(_filters),
    sortBy: str = DEFAULT_SORT,
    sortOrder: str = "desc",
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    limit = limit or get_settings().admin_orders_page_size
    result = OrderReporting(db).find_orders(filters, sort_by=sortBy, sort_order=sortOrder, page=page, limit=limit)
    return OrdersPage(
        orders=[OrderResponse.from_order(o) for o in result.orders],
        currentPage=result.current_page,
        totalPages=result.total_pages,
        totalOrders=result.total_orders,
    )


@router.get("/orders/summary-by-product", response_model=List[ProductSummary])
def summary_by_product(
    _: AdminAccount = Depends(require_admin),
    status: str = DEFAULT_SUMMARY_STATUS,
    completionDateStart: Optional[str] = None,
    completionDateEnd: Optional[str] = None,
    orderDateStart: Optional[str] = None,
    orderDateEnd: Optional[str] = None,
    manufacturer: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return OrderReporting(db).summary_by_product(
        status=status or None,
        completion_date_start=parse_date_param(completionDateStart, "completionDateStart"),
        completion_date_end=parse_date_param(completionDateEnd, "completionDateEnd"),
        order_date_start=parse_date_param(orderDateStart, "orderDateStart"),
        order_date_end=parse_date_param(orderDateEnd, "orderDateEnd"),
        manufacturer=manufacturer,
    )


@router.get("/orders/export")
def export_orders(
    _: AdminAccount = Depends(require_admin),
    filters: OrderFilters = Depends(_filters),
    db: Session = Depends(get_db),
):
    orders = OrderReporting(db).all_matching(filters)
    if not orders:
        return PlainTextResponse("No orders found matching the criteria for export.", status_code=404)

    csv = orders_to_csv(orders)
    logger.info(f"Exported {len(orders)} orders to CSV")
    return Response(
        content=csv.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.put("/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    _: AdminAccount = Depends(require_admin),
    engine: OrderEngine = Depends(get_order_engine),
):
    return OrderResponse.from_order(engine.set_status(order_id, body.status))


# ---------- הגדרות ----------

@router.get("/settings/completion-date", response_model=CompletionDateOut)
def get_completion_date(
    _: AdminAccount = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return CompletionDateOut(defaultCompletionDate=SettingsStore(db).get_default_completion_date())


@router.put("/settings/completion-date", response_model=CompletionDateUpdated)
def set_completion_date(
    body: CompletionDateUpdate,
    _: AdminAccount = Depends(require_admin),
    db: Session = Depends(get_db),
):
    new_date = SettingsStore(db).set_default_completion_date(body.defaultCompletionDate)
    return CompletionDateUpdated(
        message="תאריך השלמת הזמנות דיפולטיבי עודכן",
        defaultCompletionDate=new_date,
    )
