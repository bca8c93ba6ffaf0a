# backend/tests/test_api.py
from conftest import ADMIN, CUSTOMER
from services.locations import is_valid_area


class TestAuth:
    def test_register_normalizes_phone(self, client):
        res = client.post("/api/auth/register", json=CUSTOMER)
        assert res.status_code == 201
        user = res.json()["user"]
        assert user["phone"] == "0501234567"
        assert user["isAdmin"] is False
        assert user["address"]["area"] == "מרכז"

    def test_duplicate_phone(self, client):
        client.post("/api/auth/register", json=CUSTOMER)
        res = client.post("/api/auth/register", json={**CUSTOMER, "name": "מישהו אחר"})
        assert res.status_code == 400
        assert res.json()["message"] == "מספר טלפון זה כבר רשום במערכת"

    def test_invalid_phone(self, client):
        res = client.post("/api/auth/register", json={**CUSTOMER, "phone": "12345"})
        assert res.status_code == 400
        assert "טלפון" in res.json()["message"]

    def test_invalid_area(self, client):
        res = client.post("/api/auth/register", json={**CUSTOMER, "address": {**CUSTOMER["address"], "area": "ירח"}})
        assert res.status_code == 400
        assert "אזור" in res.json()["message"]

    def test_area_list(self):
        assert is_valid_area("נגב")
        assert not is_valid_area("ירח")
        assert not is_valid_area("")

    def test_admin_requires_password(self, client):
        res = client.post("/api/auth/register", json={**ADMIN, "password": None})
        assert res.status_code == 400
        assert "סיסמה" in res.json()["message"]

    def test_wrong_login(self, client):
        client.post("/api/auth/register", json=CUSTOMER)
        res = client.post("/api/auth/login", json={"name": "אחר", "phone": CUSTOMER["phone"]})
        assert res.status_code == 401

    def test_wrong_admin_password(self, client):
        user_id = client.post("/api/auth/register", json=ADMIN).json()["user"]["id"]
        res = client.post("/api/auth/login/admin-password", json={"userId": user_id, "password": "nope!!"})
        assert res.status_code == 401
        assert res.json()["message"] == "סיסמת מנהל שגויה"

    def test_me(self, client, customer_headers):
        res = client.get("/api/auth/me", headers=customer_headers)
        assert res.status_code == 200
        assert res.json()["name"] == CUSTOMER["name"]

    def test_missing_token(self, client):
        res = client.get("/api/orders/my")
        assert res.status_code == 401
        assert res.json()["message"] == "אימות נכשל, לא סופק טוקן"

    def test_tampered_token(self, client, customer_token):
        res = client.get("/api/orders/my", headers={"Authorization": f"Bearer {customer_token}x"})
        assert res.status_code == 401

    def test_locations(self, client):
        body = client.get("/api/locations").json()
        assert "מרכז" in body["areas"]
        assert "רחובות" in body["settlementMap"]["מרכז"]


class TestOrdersApi:
    def _create(self, client, headers, products, /, **overrides):
        payload = {
            "products": [{"productId": products["bread"], "quantity": 2, "selectedServingOption": "פרוס"}],
            "deliveryAddress": "הרצל 10, רחובות",
        }
        payload.update(overrides)
        return client.post("/api/orders", json=payload, headers=headers)

    def test_create_and_read_back(self, client, customer_headers, products):
        res = self._create(client, customer_headers, products)
        assert res.status_code == 201
        order = res.json()
        assert order["status"] == "Confirmed"
        assert order["totalPrice"] == 25.0
        assert order["products"][0]["priceAtOrder"] == 12.5
        assert order["userName"] == CUSTOMER["name"]

        mine = client.get("/api/orders/my", headers=customer_headers).json()
        assert [o["id"] for o in mine] == [order["id"]]
        single = client.get(f"/api/orders/my/{order['id']}", headers=customer_headers)
        assert single.status_code == 200

    def test_empty_basket(self, client, customer_headers, products):
        res = self._create(client, customer_headers, products, products=[])
        assert res.status_code == 400
        assert res.json()["message"] == "סל הקניות ריק"

    def test_missing_product(self, client, customer_headers, products):
        res = self._create(client, customer_headers, products, products=[{"productId": 777, "quantity": 1}])
        assert res.status_code == 400
        assert "777" in res.json()["message"]

    def test_update(self, client, customer_headers, products):
        order_id = self._create(client, customer_headers, products).json()["id"]
        res = client.put(
            f"/api/orders/my/{order_id}",
            json={"products": [{"productId": products["milk"], "quantity": 3}], "note": "בלי שקית"},
            headers=customer_headers,
        )
        assert res.status_code == 200
        body = res.json()
        assert body["totalPrice"] == 18.0
        assert body["note"] == "בלי שקית"
        assert body["modificationDate"] is not None

    def test_update_to_empty(self, client, customer_headers, products):
        order_id = self._create(client, customer_headers, products).json()["id"]
        res = client.put(
            f"/api/orders/my/{order_id}",
            json={"products": [{"productId": products["bread"], "quantity": 0}]},
            headers=customer_headers,
        )
        assert res.status_code == 400

    def test_other_customer_cannot_see_order(self, client, customer_headers, products):
        order_id = self._create(client, customer_headers, products).json()["id"]
        other = {**CUSTOMER, "name": "אחר", "phone": "0547777777"}
        client.post("/api/auth/register", json=other)
        token = client.post("/api/auth/login", json={"name": other["name"], "phone": other["phone"]}).json()["token"]
        res = client.get(f"/api/orders/my/{order_id}", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 404

    def test_customer_completion_date(self, client, customer_headers):
        res = client.get("/api/settings/completion-date", headers=customer_headers)
        assert res.status_code == 200
        assert res.json()["defaultCompletionDate"].endswith("T17:00:00")


class TestAdminApi:
    def _order(self, client, customer_headers, products):
        return client.post(
            "/api/orders",
            json={"products": [{"productId": products["milk"], "quantity": 2}], "deliveryAddress": "כתובת"},
            headers=customer_headers,
        ).json()

    def test_customer_forbidden(self, client, customer_headers):
        res = client.get("/api/admin/orders", headers=customer_headers)
        assert res.status_code == 403
        assert res.json()["message"] == "נדרשות הרשאות מנהל"

    def test_list_orders(self, client, customer_headers, admin_headers, products):
        self._order(client, customer_headers, products)
        body = client.get("/api/admin/orders", headers=admin_headers).json()
        assert body["totalOrders"] == 1
        assert body["currentPage"] == 1
        assert body["totalPages"] == 1

    def test_list_orders_unknown_manufacturer(self, client, customer_headers, admin_headers, products):
        self._order(client, customer_headers, products)
        body = client.get("/api/admin/orders", params={"manufacturer": "zzz"}, headers=admin_headers).json()
        assert body == {"orders": [], "currentPage": 1, "totalPages": 0, "totalOrders": 0}

    def test_set_status(self, client, customer_headers, admin_headers, products):
        order_id = self._order(client, customer_headers, products)["id"]
        res = client.put(f"/api/admin/orders/{order_id}/status", json={"status": "Ready"}, headers=admin_headers)
        assert res.status_code == 200
        assert res.json()["status"] == "Ready"

        res = client.put(f"/api/admin/orders/{order_id}/status", json={"status": "Shipped"}, headers=admin_headers)
        assert res.status_code == 400
        assert "Pending" in res.json()["message"]

    def test_summary(self, client, customer_headers, admin_headers, products):
        self._order(client, customer_headers, products)
        body = client.get("/api/admin/orders/summary-by-product", headers=admin_headers).json()
        assert body[0]["productName"] == "חלב"
        assert body[0]["totalQuantity"] == 2
        assert body[0]["users"][0]["userPhone"] == "0501234567"

    def test_export(self, client, customer_headers, admin_headers, products):
        self._order(client, customer_headers, products)
        res = client.get("/api/admin/orders/export", headers=admin_headers)
        assert res.status_code == 200
        assert res.headers["content-type"].startswith("text/csv")
        assert "attachment" in res.headers["content-disposition"]
        assert "חלב (x2)" in res.content.decode("utf-8-sig")

    def test_export_nothing(self, client, admin_headers):
        res = client.get("/api/admin/orders/export", headers=admin_headers)
        assert res.status_code == 404

    def test_completion_date_settings(self, client, admin_headers):
        res = client.put("/api/admin/settings/completion-date",
                         json={"defaultCompletionDate": "2999-01-01T12:00:00"}, headers=admin_headers)
        assert res.status_code == 200
        res = client.get("/api/admin/settings/completion-date", headers=admin_headers)
        assert res.json()["defaultCompletionDate"] == "2999-01-01T12:00:00"

        res = client.put("/api/admin/settings/completion-date",
                         json={"defaultCompletionDate": "2000-01-01T12:00:00"}, headers=admin_headers)
        assert res.status_code == 400

    def test_manufacturers(self, client, admin_headers, products):
        res = client.get("/api/products/manufacturers", headers=admin_headers)
        assert set(res.json()) == {"מאפיית אנג'ל", "תנובה", "Tnuva Dairy"}


class TestProductsApi:
    def test_public_list_sorted(self, client, products):
        names = [p["name"] for p in client.get("/api/products").json()]
        assert names == sorted(names)

    def test_create_without_image(self, client, admin_headers):
        res = client.post(
            "/api/products",
            data={"name": "ביצים", "pricePerUnit": "18.9", "servingOptions": "L, XL ,", "isSpecialOffer": "true"},
            headers=admin_headers,
        )
        assert res.status_code == 201
        body = res.json()
        assert body["servingOptions"] == ["L", "XL"]
        assert body["isSpecialOffer"] is True

        specials = client.get("/api/products/specials").json()
        assert [p["name"] for p in specials] == ["ביצים"]

    def test_create_invalid(self, client, admin_headers):
        res = client.post("/api/products", data={"name": "", "pricePerUnit": "-3"}, headers=admin_headers)
        assert res.status_code == 400
        assert "שם מוצר" in res.json()["message"]

    def test_delete_is_soft(self, client, admin_headers, customer_headers, products):
        order = client.post(
            "/api/orders",
            json={"products": [{"productId": products["milk"], "quantity": 1}], "deliveryAddress": "כתובת"},
            headers=customer_headers,
        ).json()
        assert client.delete(f"/api/products/{products['milk']}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/products/{products['milk']}").status_code == 404

        kept = client.get(f"/api/orders/my/{order['id']}", headers=customer_headers).json()
        assert kept["products"][0]["name"] == "חלב"


class TestApp:
    def test_unknown_route(self, client):
        res = client.get("/api/nothing-here")
        assert res.status_code == 404
        assert res.json()["message"] == "Route Not Found - /api/nothing-here"

    def test_root(self, client):
        assert "running" in client.get("/").json()["message"]
