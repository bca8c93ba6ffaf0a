# backend/services/settings_service.py
"""
מאגר ההגדרות הגלובליות (רשומה יחידה לפי מפתח קבוע).

כל מי שצריך את תאריך ההשלמה הדיפולטיבי עובר דרך get_or_default - יש מקום
אחד בלבד שמחשב את ברירת המחדל כשאין עדיין רשומה.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config.settings import get_settings
from models.admin_setting_model import AdminSetting, GLOBAL_SETTINGS_KEY
from services.errors import BusinessRuleError, InvalidInputError, StorageError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def fallback_completion_date(now: Optional[datetime] = None, days: Optional[int] = None,
                             hour: Optional[int] = None) -> datetime:
    """עכשיו + N ימים, בשעה קבועה (ברירת מחדל: 3 ימים, 17:00 שעון מקומי)"""
    cfg = get_settings()
    now = now or datetime.now()
    days = cfg.default_completion_days if days is None else days
    hour = cfg.default_completion_hour if hour is None else hour
    target = now + timedelta(days=days)
    return target.replace(hour=hour, minute=0, second=0, microsecond=0)


def parse_completion_date(raw) -> datetime:
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, str) and raw.strip():
        try:
            value = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError:
            raise InvalidInputError("פורמט תאריך לא תקין")
    else:
        raise InvalidInputError("פורמט תאריך לא תקין")

    # נשמר כזמן מקומי נאיבי, כמו שאר התאריכים במערכת
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


class SettingsStore:
    """גישה לרשומת ההגדרות הגלובלית - מוזרק למנוע ההזמנות"""

    def __init__(self, db: Session, clock: Clock = datetime.now):
        self.db = db
        self.clock = clock

    def _get_record(self) -> Optional[AdminSetting]:
        return (
            self.db.query(AdminSetting)
            .filter(AdminSetting.setting_key == GLOBAL_SETTINGS_KEY)
            .first()
        )

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error saving default completion date")
            raise StorageError("שגיאה בשמירת ההגדרות")

    def get_default_completion_date(self) -> datetime:
        record = self._get_record()
        if record is not None:
            return record.default_completion_date
        return fallback_completion_date(self.clock())

    def set_default_completion_date(self, raw) -> datetime:
        new_date = parse_completion_date(raw)
        if new_date <= self.clock():
            raise BusinessRuleError("תאריך ההשלמה חייב להיות בעתיד")

        record = self._get_record()
        try:
            if record is None:
                record = AdminSetting(setting_key=GLOBAL_SETTINGS_KEY, default_completion_date=new_date)
                self.db.add(record)
            else:
                record.default_completion_date = new_date
            self.db.commit()
        except IntegrityError:
            # כתיבה ראשונה מקבילה כבר יצרה את הרשומה - מעדכנים אותה
            self.db.rollback()
            logger.info("Global settings record created concurrently, updating it")
            record = self._get_record()
            record.default_completion_date = new_date
            self._commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error saving default completion date")
            raise StorageError("שגיאה בשמירת ההגדרות")

        self.db.refresh(record)
        logger.info(f"Default completion date set to {new_date.isoformat()}")
        return record.default_completion_date
