# backend/services/account_service.py
import logging
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from models.user_model import User
from schemas.users import AdminRegistration, CustomerRegistration, normalize_phone
from services.auth_service import hash_password, verify_password, issue_token
from services.errors import AuthError, BusinessRuleError

logger = logging.getLogger(__name__)


class AccountStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_phone(self, phone: str) -> Optional[User]:
        return self.db.query(User).filter(User.phone == normalize_phone(phone)).first()

    def account_ids_by_location(self, area: Optional[str] = None,
                                settlement: Optional[str] = None) -> List[int]:
        """אזור - התאמה מדויקת; יישוב - מכיל (ללא תלות ברישיות)"""
        q = self.db.query(User.id)
        if area:
            q = q.filter(User.address_area == area)
        if settlement:
            q = q.filter(User.address_settlement.ilike(f"%{settlement}%"))
        return [r.id for r in q.all()]

    def register(self, registration: Union[CustomerRegistration, AdminRegistration]) -> User:
        if self.find_by_phone(registration.phone):
            raise BusinessRuleError("מספר טלפון זה כבר רשום במערכת")

        user = User(
            name=registration.name,
            phone=registration.phone,
            address_area=registration.address.area,
            address_settlement=registration.address.settlement,
            address_details=registration.address.details,
        )
        if isinstance(registration, AdminRegistration):
            user.is_admin = True
            user.password_hash = hash_password(registration.password)
        else:
            user.is_admin = False
            user.password_hash = None

        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Registered {'admin' if user.is_admin else 'customer'} account {user.id}")
        return user


def login_by_name_and_phone(store: AccountStore, name: str, phone: str) -> User:
    user = store.find_by_phone(phone)
    if not user or user.name != name.strip():
        raise AuthError("שם או טלפון אינם נכונים")
    return user


def verify_admin_password(store: AccountStore, user_id: int, password: str) -> str:
    """שלב שני בהתחברות מנהל - מחזיר טוקן"""
    user = store.find_by_id(user_id)
    if not user or not user.is_admin or not user.password_hash:
        logger.warning(f"Admin password check failed: user {user_id} not found, not admin, or no password")
        raise AuthError("אימות מנהל נכשל (משתמש לא תקין)")
    if not verify_password(password, user.password_hash):
        logger.warning(f"Admin password check failed: incorrect password for user {user_id}")
        raise AuthError("סיסמת מנהל שגויה")
    logger.info(f"Admin password verified for user {user_id}")
    return issue_token(user)
