# backend/tests/test_reporting.py
from datetime import date, datetime, timedelta

import pytest

from models.product_model import Product
from models.user_model import User
from schemas.orders import OrderItemIn
from services.auth_service import CustomerAccount
from services.errors import InvalidInputError
from services.export_service import export_filename, orders_to_csv
from services.reporting_service import OrderFilters, OrderReporting, parse_date_param


def _account(db, name, phone, area, settlement):
    user = User(name=name, phone=phone, address_area=area,
                address_settlement=settlement, address_details="רחוב 1")
    db.add(user)
    db.commit()
    return CustomerAccount(id=user.id, name=user.name, phone=user.phone)


@pytest.fixture
def seeded(db, products, engine_factory, clock):
    """שלוש הזמנות בשלושה ימים, משני אזורים"""
    dana = _account(db, "דנה", "0501111111", "מרכז", "רחובות")
    yossi = _account(db, "יוסי", "0502222222", "חיפה", "קרית ים")
    engine = engine_factory()

    def order(account, lines):
        o = engine.create_order(
            account, [OrderItemIn(productId=products[k], quantity=q) for k, q in lines], "כתובת")
        clock.now += timedelta(days=1)
        return o

    o1 = order(dana, [("bread", 2), ("milk", 1)])
    o2 = order(yossi, [("cheese", 1), ("bread", 1)])
    o3 = order(dana, [("milk", 4)])
    return {"dana": dana, "yossi": yossi, "orders": [o1.id, o2.id, o3.id]}


class TestFindOrders:
    def test_no_filters_newest_first(self, db, seeded):
        result = OrderReporting(db).find_orders(OrderFilters())
        o1, o2, o3 = seeded["orders"]
        assert [o.id for o in result.orders] == [o3, o2, o1]
        assert (result.current_page, result.total_pages, result.total_orders) == (1, 1, 3)

    def test_pagination(self, db, seeded):
        result = OrderReporting(db).find_orders(OrderFilters(), page=2, limit=2)
        assert [o.id for o in result.orders] == [seeded["orders"][0]]
        assert (result.current_page, result.total_pages, result.total_orders) == (2, 2, 3)

    def test_page_past_end_is_empty(self, db, seeded):
        result = OrderReporting(db).find_orders(OrderFilters(), page=5, limit=2)
        assert result.orders == []
        assert result.total_orders == 3

    def test_invalid_paging(self, db):
        with pytest.raises(InvalidInputError):
            OrderReporting(db).find_orders(OrderFilters(), page=0)

    def test_unknown_sort_falls_back_to_order_date(self, db, seeded):
        result = OrderReporting(db).find_orders(OrderFilters(), sort_by="password", sort_order="asc")
        assert [o.id for o in result.orders] == list(reversed(seeded["orders"]))

    def test_sort_by_total_ascending(self, db, seeded):
        result = OrderReporting(db).find_orders(OrderFilters(), sort_by="totalPrice", sort_order="asc")
        assert [o.total_price for o in result.orders] == [24.0, 31.0, 32.5]

    def test_status_filter(self, db, seeded, engine_factory):
        engine_factory().set_status(seeded["orders"][1], "Ready")
        result = OrderReporting(db).find_orders(OrderFilters(status="Ready"))
        assert [o.id for o in result.orders] == [seeded["orders"][1]]

    def test_order_date_range(self, db, seeded):
        filters = OrderFilters(order_date_start=datetime(2024, 5, 2), order_date_end=datetime(2024, 5, 2, 23, 59))
        result = OrderReporting(db).find_orders(filters)
        assert [o.id for o in result.orders] == [seeded["orders"][1]]

    def test_manufacturer_filter_case_insensitive(self, db, seeded):
        result = OrderReporting(db).find_orders(OrderFilters(manufacturer="tnuva"))
        assert [o.id for o in result.orders] == [seeded["orders"][1]]

    def test_unknown_manufacturer_short_circuits(self, db, seeded):
        result = OrderReporting(db).find_orders(OrderFilters(manufacturer="אין כזה"))
        assert result.orders == []
        assert (result.current_page, result.total_pages, result.total_orders) == (1, 0, 0)

    def test_area_filter(self, db, seeded):
        result = OrderReporting(db).find_orders(OrderFilters(user_area="מרכז"))
        assert {o.user_id for o in result.orders} == {seeded["dana"].id}
        assert result.total_orders == 2

    def test_settlement_partial_match(self, db, seeded):
        result = OrderReporting(db).find_orders(OrderFilters(user_settlement="קרית"))
        assert [o.id for o in result.orders] == [seeded["orders"][1]]

    def test_area_without_accounts_is_empty(self, db, seeded):
        result = OrderReporting(db).find_orders(OrderFilters(user_area="ערבה"))
        assert result.total_orders == 0

    def test_from_query_parses_dates(self):
        filters = OrderFilters.from_query(status="", orderDateStart="2024-05-01", manufacturer="  ")
        assert filters.status is None
        assert filters.order_date_start == datetime(2024, 5, 1)
        assert filters.manufacturer is None

    def test_bad_date_param(self):
        with pytest.raises(InvalidInputError, match="orderDateEnd"):
            parse_date_param("yesterday", "orderDateEnd")


class TestSummaryByProduct:
    def test_groups_by_product(self, db, seeded, products):
        summary = OrderReporting(db).summary_by_product()
        by_name = {e["productName"]: e for e in summary}

        assert [e["productName"] for e in summary] == sorted(by_name)
        assert by_name["לחם"]["totalQuantity"] == 3
        assert by_name["חלב"]["totalQuantity"] == 5
        assert by_name["גבינה"]["totalQuantity"] == 1
        assert {u["userName"] for u in by_name["לחם"]["users"]} == {"דנה", "יוסי"}
        assert by_name["חלב"]["productId"] == products["milk"]

    def test_default_status_is_confirmed(self, db, seeded, engine_factory):
        engine_factory().set_status(seeded["orders"][2], "Delivered")
        summary = OrderReporting(db).summary_by_product()
        milk = next(e for e in summary if e["productName"] == "חלב")
        assert milk["totalQuantity"] == 1

    def test_any_status(self, db, seeded, engine_factory):
        engine_factory().set_status(seeded["orders"][2], "Delivered")
        summary = OrderReporting(db).summary_by_product(status=None)
        milk = next(e for e in summary if e["productName"] == "חלב")
        assert milk["totalQuantity"] == 5

    def test_deleted_product_still_reported(self, db, seeded, products):
        db.get(Product, products["cheese"]).is_active = False
        db.commit()
        names = [e["productName"] for e in OrderReporting(db).summary_by_product()]
        assert "גבינה" in names

    def test_manufacturer_filter(self, db, seeded):
        summary = OrderReporting(db).summary_by_product(manufacturer="Tnuva")
        assert [e["productName"] for e in summary] == ["גבינה"]

    def test_no_matches(self, db, seeded):
        assert OrderReporting(db).summary_by_product(status="Cancelled") == []


class TestExport:
    def test_csv_has_bom_hebrew_headers_and_rows(self, db, seeded):
        orders = OrderReporting(db).all_matching(OrderFilters())
        csv = orders_to_csv(orders)
        assert csv.startswith("\ufeff")
        lines = csv.lstrip("\ufeff").splitlines()
        assert lines[0].startswith("מזהה הזמנה,תאריך הזמנה")
        assert len(lines) == 4
        assert "לחם (x2)" in csv
        assert "2024-05-01" in csv

    def test_filename(self):
        assert export_filename(date(2024, 5, 1)) == "orders_export_2024-05-01.csv"
