# backend/services/export_service.py
"""ייצוא הזמנות ל-CSV (עם BOM כדי שאקסל יציג עברית נכון)"""

from datetime import date
from typing import Dict, List, Sequence

import pandas as pd

from models.order_model import Order

CSV_COLUMNS = [
    ("orderId", "מזהה הזמנה"),
    ("orderDate", "תאריך הזמנה"),
    ("completionDate", "תאריך השלמה"),
    ("userName", "שם לקוח"),
    ("userPhone", "טלפון לקוח"),
    ("deliveryAddress", "כתובת למשלוח"),
    ("totalPrice", 'מחיר סה"כ'),
    ("status", "סטטוס"),
    ("note", "הערות"),
    ("productsSummary", "סיכום מוצרים"),
]


def products_summary(order: Order) -> str:
    parts = []
    for it in order.items:
        option = f"[{it.selected_serving_option}]" if it.selected_serving_option else ""
        parts.append(f"{it.name} (x{it.quantity}) {option}".rstrip())
    return "; ".join(parts)


def flatten_orders(orders: Sequence[Order]) -> List[Dict]:
    rows = []
    for o in orders:
        rows.append({
            "orderId": str(o.id),
            "orderDate": o.order_date.strftime("%Y-%m-%d"),
            "completionDate": o.completion_date.strftime("%Y-%m-%d"),
            "userName": o.user_name,
            "userPhone": o.user_phone,
            "deliveryAddress": o.delivery_address,
            "totalPrice": o.total_price,
            "status": o.status,
            "note": o.note or "",
            "productsSummary": products_summary(o),
        })
    return rows


def orders_to_csv(orders: Sequence[Order]) -> str:
    keys = [k for k, _ in CSV_COLUMNS]
    df = pd.DataFrame(flatten_orders(orders), columns=keys)
    df = df.rename(columns=dict(CSV_COLUMNS))
    # utf-8-sig לא חל על מחרוזת, לכן ה-BOM מתווסף ידנית
    return "\ufeff" + df.to_csv(index=False)


def export_filename(today: date = None) -> str:
    today = today or date.today()
    return f"orders_export_{today:%Y-%m-%d}.csv"
