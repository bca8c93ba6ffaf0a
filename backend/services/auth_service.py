# backend/services/auth_service.py
"""
אימות: גיבוב סיסמאות מנהלים וטוקנים חתומים.

הטוקן בפורמט JWT (header.payload.signature, base64 בטוח ל-URL) חתום ב-HMAC-SHA256
עם הסוד מההגדרות.
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from passlib.context import CryptContext

from config.settings import get_settings
from models.user_model import User
from services.errors import AuthError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# ---------- זהות מאומתת: שני סוגים מפורשים ----------

@dataclass(frozen=True)
class CustomerAccount:
    id: int
    name: str
    phone: str


@dataclass(frozen=True)
class AdminAccount:
    id: int
    name: str
    phone: str


AuthenticatedAccount = Union[CustomerAccount, AdminAccount]


def account_from_user(user: User) -> AuthenticatedAccount:
    cls = AdminAccount if user.is_admin else CustomerAccount
    return cls(id=user.id, name=user.name, phone=user.phone)


# ---------- סיסמאות ----------

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


# ---------- טוקנים ----------

def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _b64decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode(), message, hashlib.sha256).digest()


def issue_token(user: User, now: Optional[float] = None) -> str:
    cfg = get_settings()
    issued = int(now if now is not None else time.time())
    header = {"alg": "HS256", "typ": "JWT"}
    payload = {
        "sub": user.id,
        "name": user.name,
        "isAdmin": bool(user.is_admin),
        "iat": issued,
        "exp": issued + cfg.auth_token_ttl_hours * 3600,
    }
    header_b64 = _b64encode(json.dumps(header, separators=(",", ":")).encode())
    payload_b64 = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
    signature = _sign(f"{header_b64}.{payload_b64}".encode(), cfg.auth_secret)
    return f"{header_b64}.{payload_b64}.{_b64encode(signature)}"


def decode_token(token: str, now: Optional[float] = None) -> Dict[str, Any]:
    cfg = get_settings()
    try:
        header_b64, payload_b64, signature_b64 = token.split(".")
    except ValueError:
        raise AuthError("אימות נכשל, טוקן לא תקין")

    expected = _sign(f"{header_b64}.{payload_b64}".encode(), cfg.auth_secret)
    try:
        signature = _b64decode(signature_b64)
        payload = json.loads(_b64decode(payload_b64))
    except (ValueError, json.JSONDecodeError):
        raise AuthError("אימות נכשל, טוקן לא תקין")

    if not hmac.compare_digest(expected, signature):
        raise AuthError("אימות נכשל, טוקן לא תקין")

    current = int(now if now is not None else time.time())
    if not isinstance(payload.get("exp"), int) or payload["exp"] < current:
        raise AuthError("פג תוקף ההתחברות, יש להתחבר מחדש")
    if not isinstance(payload.get("sub"), int):
        raise AuthError("אימות נכשל, טוקן לא תקין")
    return payload
