# backend/services/reporting_service.py
"""דוחות מנהל: רשימת הזמנות מסוננת עם עימוד, וסיכום כמויות לפי מוצר"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session, selectinload

from models.order_model import Order
from models.order_item_model import OrderItem
from services.account_service import AccountStore
from services.catalog_service import CatalogStore
from services.errors import InvalidInputError

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "orderDate": Order.order_date,
    "completionDate": Order.completion_date,
    "userName": Order.user_name,
    "totalPrice": Order.total_price,
    "status": Order.status,
}
DEFAULT_SORT = "orderDate"
DEFAULT_SUMMARY_STATUS = "Confirmed"


def parse_date_param(raw: Optional[str], name: str) -> Optional[datetime]:
    if raw is None or not str(raw).strip():
        return None
    try:
        value = datetime.fromisoformat(str(raw).strip().replace("Z", "+00:00"))
    except ValueError:
        raise InvalidInputError(f"תאריך לא תקין בפרמטר {name}")
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


@dataclass
class OrderFilters:
    status: Optional[str] = None
    order_date_start: Optional[datetime] = None
    order_date_end: Optional[datetime] = None
    completion_date_start: Optional[datetime] = None
    completion_date_end: Optional[datetime] = None
    manufacturer: Optional[str] = None
    user_area: Optional[str] = None
    user_settlement: Optional[str] = None

    @classmethod
    def from_query(cls, status=None, orderDateStart=None, orderDateEnd=None,
                   completionDateStart=None, completionDateEnd=None,
                   manufacturer=None, userArea=None, userSettlement=None) -> "OrderFilters":
        return cls(
            status=status or None,
            order_date_start=parse_date_param(orderDateStart, "orderDateStart"),
            order_date_end=parse_date_param(orderDateEnd, "orderDateEnd"),
            completion_date_start=parse_date_param(completionDateStart, "completionDateStart"),
            completion_date_end=parse_date_param(completionDateEnd, "completionDateEnd"),
            manufacturer=(manufacturer or "").strip() or None,
            user_area=userArea or None,
            user_settlement=(userSettlement or "").strip() or None,
        )


@dataclass
class OrdersPageResult:
    orders: List[Order]
    current_page: int
    total_pages: int
    total_orders: int

    @classmethod
    def empty(cls) -> "OrdersPageResult":
        return cls(orders=[], current_page=1, total_pages=0, total_orders=0)


def _date_range(column, start: Optional[datetime], end: Optional[datetime]) -> list:
    conds = []
    if start is not None:
        conds.append(column >= start)
    if end is not None:
        conds.append(column <= end)
    return conds


class OrderReporting:
    def __init__(self, db: Session):
        self.db = db
        self.catalog = CatalogStore(db)
        self.accounts = AccountStore(db)

    def build_conditions(self, filters: OrderFilters) -> Optional[list]:
        """מחזיר רשימת תנאים (AND), או None אם ברור מראש שאין התאמות"""
        conds = []
        if filters.status:
            conds.append(Order.status == filters.status)
        conds += _date_range(Order.order_date, filters.order_date_start, filters.order_date_end)
        conds += _date_range(Order.completion_date, filters.completion_date_start, filters.completion_date_end)

        if filters.manufacturer:
            product_ids = self.catalog.product_ids_by_manufacturer(filters.manufacturer)
            if not product_ids:
                return None
            conds.append(Order.items.any(OrderItem.product_id.in_(product_ids)))

        if filters.user_area or filters.user_settlement:
            user_ids = self.accounts.account_ids_by_location(filters.user_area, filters.user_settlement)
            if not user_ids:
                return None
            conds.append(Order.user_id.in_(user_ids))

        return conds

    def find_orders(self, filters: OrderFilters, sort_by: str = DEFAULT_SORT,
                    sort_order: str = "desc", page: int = 1, limit: int = 15) -> OrdersPageResult:
        if page < 1 or limit < 1:
            raise InvalidInputError("פרמטרי עימוד לא תקינים")

        conds = self.build_conditions(filters)
        if conds is None:
            return OrdersPageResult.empty()

        if sort_by in SORT_FIELDS:
            column = SORT_FIELDS[sort_by]
            order_clause = column.asc() if sort_order == "asc" else column.desc()
        else:
            order_clause = Order.order_date.desc()

        base = self.db.query(Order).filter(and_(*conds)) if conds else self.db.query(Order)
        total = base.count()
        orders = (
            base.options(selectinload(Order.items))
            .order_by(order_clause, Order.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return OrdersPageResult(
            orders=orders,
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_orders=total,
        )

    def all_matching(self, filters: OrderFilters) -> List[Order]:
        """לייצוא - כל ההזמנות התואמות, מהחדשה לישנה, בלי עימוד"""
        conds = self.build_conditions(filters)
        if conds is None:
            return []
        q = self.db.query(Order).options(selectinload(Order.items))
        if conds:
            q = q.filter(and_(*conds))
        return q.order_by(Order.order_date.desc(), Order.id.desc()).all()

    def summary_by_product(self, status: Optional[str] = DEFAULT_SUMMARY_STATUS,
                           completion_date_start: Optional[datetime] = None,
                           completion_date_end: Optional[datetime] = None,
                           order_date_start: Optional[datetime] = None,
                           order_date_end: Optional[datetime] = None,
                           manufacturer: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        לכל מוצר שמופיע בהזמנות התואמות: סה"כ כמות ורשימת המזמינים.
        המידע נלקח משורות ההזמנה עצמן, כך שמוצר שנמחק מהקטלוג עדיין מופיע.
        """
        q = self.db.query(OrderItem, Order).join(Order, OrderItem.order_id == Order.id)
        if status:
            q = q.filter(Order.status == status)
        for cond in _date_range(Order.completion_date, completion_date_start, completion_date_end):
            q = q.filter(cond)
        for cond in _date_range(Order.order_date, order_date_start, order_date_end):
            q = q.filter(cond)
        if manufacturer and manufacturer.strip():
            q = q.filter(OrderItem.manufacturer.ilike(f"%{manufacturer.strip()}%"))

        rows = q.order_by(Order.id.asc(), OrderItem.position.asc()).all()

        grouped: Dict[int, Dict[str, Any]] = {}
        for item, order in rows:
            entry = grouped.get(item.product_id)
            if entry is None:
                entry = grouped[item.product_id] = {
                    "productId": item.product_id,
                    "productName": item.name,
                    "manufacturer": item.manufacturer,
                    "totalQuantity": 0,
                    "users": [],
                }
            entry["totalQuantity"] += item.quantity
            entry["users"].append({
                "orderId": order.id,
                "userId": order.user_id,
                "userName": order.user_name,
                "userPhone": order.user_phone,
                "quantity": item.quantity,
                "orderDate": order.order_date,
                "completionDate": order.completion_date,
            })

        summary = sorted(grouped.values(), key=lambda e: e["productName"])
        logger.debug(f"Product summary built from {len(rows)} lines, {len(summary)} products")
        return summary
