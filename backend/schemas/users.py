import re
from datetime import datetime
from typing import Optional, Union, NewType

from pydantic import BaseModel, Field, constr, field_validator, model_validator

from services.locations import is_valid_area

# טיפוסי עזר
PersonName = NewType("PersonName", constr(strip_whitespace=True, min_length=1, max_length=255))
Password = NewType("Password", constr(min_length=6, max_length=128))

PHONE_RE = re.compile(r"^05\d{8}$")


def normalize_phone(raw: str) -> str:
    """מסיר מקפים ורווחים - הטלפון נשמר כספרות בלבד"""
    return re.sub(r"[-\s]", "", raw or "")


class Address(BaseModel):
    area: constr(strip_whitespace=True, min_length=1)
    settlement: constr(strip_whitespace=True, min_length=1)
    details: constr(strip_whitespace=True, min_length=1)

    @field_validator("area")
    @classmethod
    def _area_in_list(cls, v: str) -> str:
        if not is_valid_area(v):
            raise ValueError("ערך אזור אינו תקין")
        return v


class _RegistrationBase(BaseModel):
    name: PersonName
    phone: str
    address: Address

    @field_validator("phone")
    @classmethod
    def _phone_format(cls, v: str) -> str:
        digits = normalize_phone(v)
        if not PHONE_RE.match(digits):
            raise ValueError(f"{v} אינו מספר טלפון ישראלי תקין (צריך להתחיל ב-05 ולהכיל 10 ספרות)")
        return digits


class CustomerRegistration(_RegistrationBase):
    """לקוח רגיל - אין סיסמה"""


class AdminRegistration(_RegistrationBase):
    """מנהל - סיסמה חובה"""
    password: Password


Registration = Union[CustomerRegistration, AdminRegistration]


class RegisterPayload(_RegistrationBase):
    isAdmin: bool = False
    password: Optional[str] = None

    @model_validator(mode="after")
    def _admin_needs_password(self):
        if self.isAdmin and (not self.password or len(self.password) < 6):
            raise ValueError("רישום מנהל דורש סיסמה באורך 6 תווים לפחות")
        return self

    def to_registration(self) -> Registration:
        common = {"name": self.name, "phone": self.phone, "address": self.address}
        if self.isAdmin:
            return AdminRegistration(password=self.password, **common)
        # סיסמה של לקוח רגיל לא נשמרת בכלל
        return CustomerRegistration(**common)


class LoginPayload(BaseModel):
    name: PersonName
    phone: constr(strip_whitespace=True, min_length=1)


class AdminPasswordPayload(BaseModel):
    userId: int = Field(gt=0)
    password: constr(min_length=1)


class UserOut(BaseModel):
    id: int
    name: str
    phone: str
    address: Address
    isAdmin: bool
    createdAt: Optional[datetime] = None


class RegisterResponse(BaseModel):
    message: str
    user: UserOut


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class AdminLoginRequired(BaseModel):
    adminLoginRequired: bool = True
    userId: int
    message: str
