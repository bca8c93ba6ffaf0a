# backend/tests/conftest.py
import os

# חייב לקרות לפני שמודול ההגדרות נטען
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_SECRET"] = "test-secret"
os.environ["REQUIRE_SERVING_OPTION"] = "false"
for _name in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
    os.environ.pop(_name, None)

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import models  # noqa: E402,F401
from database.session import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from models.product_model import Product  # noqa: E402
from services.order_service import OrderEngine, ServingOptionPolicy  # noqa: E402
from services.settings_service import SettingsStore  # noqa: E402

FIXED_NOW = datetime(2024, 5, 1, 10, 30, 0)

CUSTOMER = {
    "name": "דנה כהן",
    "phone": "050-1234567",
    "address": {"area": "מרכז", "settlement": "רחובות", "details": "הרצל 10"},
}
ADMIN = {
    "name": "מנהל ראשי",
    "phone": "0529876543",
    "address": {"area": "נגב", "settlement": "באר שבע", "details": "רגר 1"},
    "isAdmin": True,
    "password": "secret123",
}


class FakeClock:
    """שעון ניתן לשליטה לבדיקות"""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine_factory(db, clock):
    def make(required: bool = False) -> OrderEngine:
        return OrderEngine(
            db,
            settings_store=SettingsStore(db, clock=clock),
            policy=ServingOptionPolicy(required=required),
            clock=clock,
        )
    return make


@pytest.fixture
def products(db):
    """קטלוג בסיסי: לחם עם אפשרויות הגשה, חלב בלי, גבינה של יצרן אחר"""
    bread = Product(name="לחם", price_per_unit=12.5, manufacturer="מאפיית אנג'ל",
                    serving_options=["פרוס", "שלם"])
    milk = Product(name="חלב", price_per_unit=6.0, manufacturer="תנובה")
    cheese = Product(name="גבינה", price_per_unit=20.0, manufacturer="Tnuva Dairy")
    db.add_all([bread, milk, cheese])
    db.commit()
    return {"bread": bread.id, "milk": milk.id, "cheese": cheese.id}


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_token(client):
    assert client.post("/api/auth/register", json=CUSTOMER).status_code == 201
    res = client.post("/api/auth/login", json={"name": CUSTOMER["name"], "phone": CUSTOMER["phone"]})
    assert res.status_code == 200
    return res.json()["token"]


@pytest.fixture
def admin_token(client):
    assert client.post("/api/auth/register", json=ADMIN).status_code == 201
    res = client.post("/api/auth/login", json={"name": ADMIN["name"], "phone": ADMIN["phone"]})
    assert res.json()["adminLoginRequired"] is True
    res = client.post(
        "/api/auth/login/admin-password",
        json={"userId": res.json()["userId"], "password": ADMIN["password"]},
    )
    assert res.status_code == 200
    return res.json()["token"]


@pytest.fixture
def customer_headers(customer_token):
    return _auth(customer_token)


@pytest.fixture
def admin_headers(admin_token):
    return _auth(admin_token)
