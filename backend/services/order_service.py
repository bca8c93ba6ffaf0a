# backend/services/order_service.py
"""
מנוע ההזמנות: יצירה, עדכון ושינוי סטטוס.

המחיר תמיד מחושב בשרת מול הקטלוג העדכני, וכל שורה נשמרת כצילום (שם, יצרן,
מחיר ליחידה) כך ששינוי או מחיקה של מוצר לא משנים הזמנות קיימות.
כל פעולה = קריאות ואז כתיבה אחת; אין נעילה ואין טוקן גרסה, כך ששני עדכונים
מקבילים לאותה הזמנה - האחרון גובר.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from config.settings import get_settings
from models.order_model import Order, OrderStatus, EDITABLE_STATUSES, can_transition
from models.order_item_model import OrderItem
from models.product_model import Product
from schemas.orders import OrderItemIn
from services.auth_service import AuthenticatedAccount
from services.catalog_service import CatalogStore
from services.errors import (
    BusinessRuleError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from services.settings_service import SettingsStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServingOptionPolicy:
    """האם חובה לבחור אפשרות הגשה כשלמוצר מוגדרות אפשרויות"""
    required: bool = False

    @classmethod
    def from_settings(cls) -> "ServingOptionPolicy":
        return cls(required=get_settings().require_serving_option)


@dataclass(frozen=True)
class LineSnapshot:
    product_id: int
    name: str
    quantity: int
    price_at_order: float
    selected_serving_option: Optional[str]
    manufacturer: Optional[str]
    packet_count: Optional[int]

    @property
    def line_total(self) -> float:
        return self.price_at_order * self.quantity

    def to_item(self, position: int) -> OrderItem:
        return OrderItem(
            position=position,
            product_id=self.product_id,
            name=self.name,
            quantity=self.quantity,
            price_at_order=self.price_at_order,
            selected_serving_option=self.selected_serving_option,
            manufacturer=self.manufacturer,
            packet_count=self.packet_count,
        )


def is_valid_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def normalize_packet_count(value) -> Optional[int]:
    """רק מספר שלם >= 1 נשמר; כל ערך אחר הופך בשקט ל-None"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    if not isinstance(value, int) or value < 1:
        return None
    return value


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class OrderEngine:
    def __init__(
        self,
        db: Session,
        catalog: Optional[CatalogStore] = None,
        settings_store: Optional[SettingsStore] = None,
        policy: Optional[ServingOptionPolicy] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self.catalog = catalog or CatalogStore(db)
        self.settings_store = settings_store or SettingsStore(db, clock=clock)
        self.policy = policy or ServingOptionPolicy.from_settings()
        self.clock = clock

    # ---------- תמחור ואימות ----------

    def _validate_serving_option(self, product: Product, selected: Optional[str]) -> Optional[str]:
        options = list(product.serving_options or [])
        if selected:
            if not options:
                raise BusinessRuleError(f"למוצר '{product.name}' אין אפשרויות הגשה לבחירה.")
            if selected not in options:
                raise BusinessRuleError(
                    f"אפשרות הגשה '{selected}' אינה תקינה עבור המוצר '{product.name}'. "
                    f"אפשרויות זמינות: {', '.join(options)}"
                )
            return selected
        if options and self.policy.required:
            raise BusinessRuleError(f"יש לבחור אפשרות הגשה עבור המוצר '{product.name}'.")
        return None

    def price_lines(self, items: Sequence[OrderItemIn],
                    missing_message: str = "חלק מהמוצרים בסל אינם זמינים") -> Tuple[List[LineSnapshot], float]:
        """שליפת המוצרים במכה אחת, אימות אפשרויות הגשה וחישוב הסכום"""
        product_ids = [item.productId for item in items]
        products: Dict[int, Product] = self.catalog.find_products_by_ids(product_ids)

        missing = [pid for pid in product_ids if pid not in products]
        if missing:
            missing_str = ", ".join(str(pid) for pid in dict.fromkeys(missing))
            raise BusinessRuleError(f"{missing_message} ({missing_str})")

        total = 0.0
        lines: List[LineSnapshot] = []
        for item in items:
            product = products[item.productId]
            option = self._validate_serving_option(product, item.selectedServingOption)
            line = LineSnapshot(
                product_id=product.id,
                name=product.name,
                quantity=item.quantity,
                price_at_order=product.price_per_unit,
                selected_serving_option=option,
                manufacturer=product.manufacturer,
                packet_count=normalize_packet_count(item.packetCount),
            )
            total += line.line_total
            lines.append(line)
        return lines, total

    def _replace_items(self, order: Order, lines: Sequence[LineSnapshot]) -> None:
        """מחליף את כל שורות ההזמנה במסד, גם שורות שנכתבו אחרי שההזמנה נטענה"""
        self.db.query(OrderItem).filter(OrderItem.order_id == order.id).delete(synchronize_session=False)
        # האוסף שנטען כבר לא משקף את המסד
        self.db.expire(order, ["items"])
        order.items = [line.to_item(i) for i, line in enumerate(lines)]

    def _commit(self, order: Order, failure_message: str) -> Order:
        try:
            self.db.add(order)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(failure_message)
            raise StorageError(failure_message)
        self.db.refresh(order)
        return order

    # ---------- יצירה ----------

    def create_order(self, account: AuthenticatedAccount, items: Sequence[OrderItemIn],
                     delivery_address: Optional[str], note: Optional[str] = None) -> Order:
        if not items:
            raise InvalidInputError("סל הקניות ריק")
        if not delivery_address or not delivery_address.strip():
            raise InvalidInputError("כתובת למשלוח היא שדה חובה")
        if any(not is_valid_id(item.productId) for item in items):
            raise InvalidInputError("מזהה מוצר לא תקין בסל הקניות")
        if any(not isinstance(item.quantity, int) or item.quantity < 1 for item in items):
            raise InvalidInputError("כמות חייבת להיות לפחות 1")

        lines, total = self.price_lines(items)
        completion_date = self.settings_store.get_default_completion_date()
        now = self.clock()

        order = Order(
            user_id=account.id,
            user_name=account.name,
            user_phone=account.phone,
            delivery_address=delivery_address.strip(),
            items=[line.to_item(i) for i, line in enumerate(lines)],
            total_price=total,
            order_date=now,
            created_at=now,
            updated_at=now,
            completion_date=completion_date,
            note=_clean_text(note),
            # יצירה ע"י המשתמש מאושרת מיד (ולא Pending של ברירת המחדל)
            status=OrderStatus.CONFIRMED.value,
        )
        order = self._commit(order, "שגיאה ביצירת ההזמנה")
        logger.info(f"Order {order.id} created by account {account.id}: {len(lines)} lines, total {total:.2f}")
        return order

    # ---------- קריאה ----------

    def list_for_account(self, account: AuthenticatedAccount) -> List[Order]:
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.user_id == account.id)
            .order_by(Order.order_date.desc(), Order.id.desc())
            .all()
        )

    def get_for_account(self, account: AuthenticatedAccount, order_id) -> Order:
        if not is_valid_id(order_id):
            raise InvalidInputError("מזהה הזמנה לא תקין")
        order = (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.id == order_id, Order.user_id == account.id)
            .first()
        )
        if not order:
            raise NotFoundError("הזמנה לא נמצאה או שאינה שייכת למשתמש זה")
        return order

    # ---------- עדכון ע"י הלקוח ----------

    def update_order(self, account: AuthenticatedAccount, order_id, items: Sequence[OrderItemIn],
                     delivery_address: Optional[str] = None, note: Optional[str] = None) -> Order:
        order = self.get_for_account(account, order_id)

        if OrderStatus(order.status) not in EDITABLE_STATUSES:
            raise BusinessRuleError(f"לא ניתן לעדכן הזמנה במצב '{order.status}'")

        if items is None or any(
            item is None
            or not is_valid_id(item.productId)
            or not isinstance(item.quantity, int)
            or item.quantity < 0
            for item in items
        ):
            raise InvalidInputError("פרטי המוצרים בעדכון אינם תקינים (מזהה לא תקין או כמות שלילית)")

        # כמות 0 = הסרה
        remaining = [item for item in items if item.quantity > 0]
        if not remaining:
            # TODO: להחליט אם ריקון הזמנה צריך לבטל אותה; כרגע פשוט נדחה
            raise BusinessRuleError("לא ניתן לעדכן להזמנה ריקה. למחיקת הזמנה, השתמש בפונקציונליות נפרדת (אם קיימת).")

        # תמחור מחדש מול המחירים והאפשרויות העדכניים בקטלוג
        lines, total = self.price_lines(remaining, missing_message="חלק מהמוצרים בעדכון אינם זמינים")

        self._replace_items(order, lines)
        order.total_price = total
        if delivery_address and delivery_address.strip():
            order.delivery_address = delivery_address.strip()
        order.note = _clean_text(note)
        order.modification_date = self.clock()

        order = self._commit(order, "שגיאה בעדכון ההזמנה")
        logger.info(f"Order {order.id} updated by account {account.id}: {len(lines)} lines, total {total:.2f}")
        return order

    # ---------- סטטוס (מנהל) ----------

    def set_status(self, order_id, status: Optional[str]) -> Order:
        if not is_valid_id(order_id):
            raise InvalidInputError("מזהה הזמנה לא תקין")
        if not status or status not in OrderStatus.values():
            raise InvalidInputError(f"סטטוס לא תקין. סטטוסים אפשריים: {', '.join(OrderStatus.values())}")

        order = self.db.get(Order, order_id)
        if not order:
            raise NotFoundError("הזמנה לא נמצאה")

        new_status = OrderStatus(status)
        if not can_transition(OrderStatus(order.status), new_status):
            raise BusinessRuleError(f"לא ניתן להעביר הזמנה מ-'{order.status}' ל-'{new_status.value}'")

        if order.status != new_status.value:
            order.status = new_status.value
            order.modification_date = self.clock()

        order = self._commit(order, "שגיאה בעדכון סטטוס ההזמנה")
        logger.info(f"Order {order.id} status set to {order.status}")
        return order
