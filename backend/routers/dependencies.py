# backend/routers/dependencies.py
import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from database.session import get_db
from services.auth_service import (
    AdminAccount,
    AuthenticatedAccount,
    CustomerAccount,
    account_from_user,
    decode_token,
)
from services.account_service import AccountStore
from services.errors import AuthError, ForbiddenError
from services.order_service import OrderEngine

logger = logging.getLogger(__name__)


def get_current_account(request: Request, db: Session = Depends(get_db)) -> AuthenticatedAccount:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="אימות נכשל, לא סופק טוקן")

    token = header.split(" ", 1)[1].strip()
    try:
        payload = decode_token(token)
    except AuthError as e:
        logger.info(f"Token verification failed: {e.message}")
        raise HTTPException(status_code=401, detail=e.message)

    user = AccountStore(db).find_by_id(payload["sub"])
    if not user:
        raise HTTPException(status_code=401, detail="משתמש לא נמצא")
    return account_from_user(user)


def require_admin(account: AuthenticatedAccount = Depends(get_current_account)) -> AdminAccount:
    match account:
        case AdminAccount():
            return account
        case CustomerAccount():
            raise ForbiddenError("נדרשות הרשאות מנהל")
    raise ForbiddenError("נדרשות הרשאות מנהל")


def get_order_engine(db: Session = Depends(get_db)) -> OrderEngine:
    return OrderEngine(db)
