# backend/services/catalog_service.py
"""גישת קריאה וכתיבה לקטלוג המוצרים"""

import logging
import math
from typing import Dict, Iterable, List, Optional

from sqlalchemy import true, func
from sqlalchemy.orm import Session

from models.product_model import Product
from services.errors import InvalidInputError

logger = logging.getLogger(__name__)


def parse_serving_options(raw) -> List[str]:
    """'פרוס, שלם ,' -> ['פרוס', 'שלם']"""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        parts = raw
    elif isinstance(raw, str):
        parts = raw.split(",")
    else:
        return []
    return [p.strip() for p in parts if isinstance(p, str) and p.strip()]


class CatalogStore:
    def __init__(self, db: Session):
        self.db = db

    def _active(self):
        return self.db.query(Product).filter(Product.is_active == true())

    def find_product(self, product_id: int) -> Optional[Product]:
        return self._active().filter(Product.id == product_id).first()

    def find_products_by_ids(self, ids: Iterable[int]) -> Dict[int, Product]:
        uniq = set(ids)
        if not uniq:
            return {}
        products = self._active().filter(Product.id.in_(uniq)).all()
        return {p.id: p for p in products}

    def list_products(self, specials_only: bool = False) -> List[Product]:
        q = self._active()
        if specials_only:
            q = q.filter(Product.is_special_offer == true())
        return q.order_by(Product.name.asc()).all()

    def product_ids_by_manufacturer(self, fragment: str) -> List[int]:
        """מוצרים שהיצרן שלהם מכיל את המחרוזת (ללא תלות ברישיות)"""
        pattern = f"%{fragment.lower()}%"
        rows = (
            self.db.query(Product.id)
            .filter(Product.manufacturer.isnot(None))
            .filter(func.lower(Product.manufacturer).like(pattern))
            .all()
        )
        return [r.id for r in rows]

    def distinct_manufacturers(self) -> List[str]:
        rows = (
            self.db.query(Product.manufacturer)
            .filter(Product.is_active == true(), Product.manufacturer.isnot(None), Product.manufacturer != "")
            .distinct()
            .all()
        )
        return sorted({r.manufacturer for r in rows}, key=lambda m: m.casefold())


def _parse_bool(raw) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("true", "1", "on", "yes")


def validate_product_fields(data: Dict, partial: bool = False) -> Dict:
    """
    קלט מטופס (מחרוזות) -> ערכים לעמודות המוצר.
    כל השגיאות נאספות ומוחזרות כהודעה אחת.
    """
    errors: List[str] = []
    out: Dict = {}

    if "name" in data or not partial:
        name = (data.get("name") or "").strip()
        if not name:
            errors.append("שם מוצר הוא שדה חובה")
        out["name"] = name

    if "pricePerUnit" in data or not partial:
        raw = data.get("pricePerUnit")
        if raw is None or str(raw).strip() == "":
            errors.append("מחיר ליחידה הוא שדה חובה")
        else:
            try:
                price = float(raw)
                if not math.isfinite(price):
                    raise ValueError
                if price < 0:
                    errors.append("מחיר לא יכול להיות שלילי")
                out["price_per_unit"] = price
            except (TypeError, ValueError):
                errors.append(f"{raw} אינו מחיר תקין")

    if "description" in data:
        out["description"] = (data.get("description") or "").strip()

    if "isSpecialOffer" in data:
        out["is_special_offer"] = _parse_bool(data.get("isSpecialOffer"))

    if "manufacturer" in data:
        out["manufacturer"] = (data.get("manufacturer") or "").strip() or None

    if "servingOptions" in data:
        out["serving_options"] = parse_serving_options(data.get("servingOptions"))

    if "defaultPacketCount" in data:
        raw = data.get("defaultPacketCount")
        try:
            as_float = float(raw)
            if not as_float.is_integer():
                raise ValueError
            count = int(as_float)
            if count < 0:
                errors.append("מספר אריזות לא יכול להיות שלילי")
            out["default_packet_count"] = count
        except (TypeError, ValueError):
            errors.append(f"{raw} אינו מספר שלם תקין עבור מספר אריזות")

    if errors:
        raise InvalidInputError(", ".join(errors))
    return out
