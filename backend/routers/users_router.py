# backend/routers/users_router.py
import logging
from typing import Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.session import get_db
from models.user_model import User
from routers.dependencies import get_current_account
from schemas.users import (
    AdminLoginRequired,
    AdminPasswordPayload,
    LoginPayload,
    LoginResponse,
    RegisterPayload,
    RegisterResponse,
    UserOut,
)
from services.account_service import AccountStore, login_by_name_and_phone, verify_admin_password
from services.auth_service import AuthenticatedAccount, issue_token
from services.errors import NotFoundError
from services.locations import AREAS, SETTLEMENT_MAP

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
locations_router = APIRouter(prefix="/locations", tags=["locations"])


def _user_out(u: User) -> UserOut:
    return UserOut(
        id=u.id,
        name=u.name,
        phone=u.phone,
        address=u.address,
        isAdmin=bool(u.is_admin),
        createdAt=u.created_at,
    )


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register_user(body: RegisterPayload, db: Session = Depends(get_db)):
    user = AccountStore(db).register(body.to_registration())
    return RegisterResponse(message="ההרשמה בוצעה בהצלחה!", user=_user_out(user))


@router.post("/login", response_model=Union[LoginResponse, AdminLoginRequired])
def login(body: LoginPayload, db: Session = Depends(get_db)):
    user = login_by_name_and_phone(AccountStore(db), body.name, body.phone)

    if user.is_admin:
        # מנהל - עוד לא מחברים, צריך סיסמה בשלב שני
        logger.info(f"Admin login attempt detected for user {user.id}")
        return AdminLoginRequired(userId=user.id, message="נדרשת סיסמת מנהל")

    return LoginResponse(message="התחברת בהצלחה!", token=issue_token(user), user=_user_out(user))


@router.post("/login/admin-password", response_model=LoginResponse)
def login_admin_password(body: AdminPasswordPayload, db: Session = Depends(get_db)):
    store = AccountStore(db)
    token = verify_admin_password(store, body.userId, body.password)
    user = store.find_by_id(body.userId)
    return LoginResponse(message="התחברת בהצלחה כמנהל!", token=token, user=_user_out(user))


@router.get("/me", response_model=UserOut)
def me(account: AuthenticatedAccount = Depends(get_current_account), db: Session = Depends(get_db)):
    user = AccountStore(db).find_by_id(account.id)
    if not user:
        raise NotFoundError("משתמש לא נמצא")
    return _user_out(user)


@locations_router.get("")
def get_locations():
    return {"areas": AREAS, "settlementMap": SETTLEMENT_MAP}
