# backend/tests/test_settings.py
from datetime import datetime, timedelta, timezone

import pytest

from database.session import SessionLocal
from models.admin_setting_model import AdminSetting
from services.errors import BusinessRuleError, InvalidInputError
from services.settings_service import (
    SettingsStore,
    fallback_completion_date,
    parse_completion_date,
)


class TestFallback:
    def test_three_days_at_five_pm(self):
        assert fallback_completion_date(datetime(2024, 5, 1, 10, 30, 45, 123)) == datetime(2024, 5, 4, 17, 0)

    def test_late_evening_still_same_rule(self):
        assert fallback_completion_date(datetime(2024, 12, 30, 23, 59)) == datetime(2025, 1, 2, 17, 0)

    def test_store_without_record_uses_fallback(self, db, clock):
        assert SettingsStore(db, clock=clock).get_default_completion_date() == datetime(2024, 5, 4, 17, 0)


class TestSetCompletionDate:
    def test_future_date_round_trip(self, db, clock):
        store = SettingsStore(db, clock=clock)
        target = datetime(2024, 6, 1, 9, 0)
        assert store.set_default_completion_date("2024-06-01T09:00:00") == target
        assert store.get_default_completion_date() == target

    def test_second_write_updates_single_record(self, db, clock):
        store = SettingsStore(db, clock=clock)
        store.set_default_completion_date("2024-06-01T09:00:00")
        store.set_default_completion_date("2024-07-01T09:00:00")
        assert db.query(AdminSetting).count() == 1
        assert store.get_default_completion_date() == datetime(2024, 7, 1, 9, 0)

    @pytest.mark.parametrize("raw", ["2024-04-30T10:00:00", "2024-05-01T10:30:00"])
    def test_past_or_now_rejected(self, db, clock, raw):
        store = SettingsStore(db, clock=clock)
        with pytest.raises(BusinessRuleError, match="בעתיד"):
            store.set_default_completion_date(raw)
        assert db.query(AdminSetting).count() == 0

    @pytest.mark.parametrize("raw", [None, "", "not-a-date", 12])
    def test_invalid_format(self, db, clock, raw):
        with pytest.raises(InvalidInputError, match="פורמט תאריך"):
            SettingsStore(db, clock=clock).set_default_completion_date(raw)

    def test_rejected_write_keeps_previous_value(self, db, clock):
        store = SettingsStore(db, clock=clock)
        store.set_default_completion_date("2024-06-01T09:00:00")
        with pytest.raises(BusinessRuleError):
            store.set_default_completion_date("2020-01-01T00:00:00")
        assert store.get_default_completion_date() == datetime(2024, 6, 1, 9, 0)


class TestParseCompletionDate:
    def test_aware_value_converted_to_local_naive(self):
        aware = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        parsed = parse_completion_date("2024-06-01T12:00:00Z")
        assert parsed.tzinfo is None
        assert parsed == aware.astimezone().replace(tzinfo=None)

    def test_datetime_passthrough(self):
        value = datetime(2024, 6, 1) + timedelta(hours=3)
        assert parse_completion_date(value) == value


class TestConcurrentFirstWrite:
    def test_record_created_by_another_session_is_updated(self, db, clock, monkeypatch):
        other = SessionLocal()
        try:
            SettingsStore(other, clock=clock).set_default_completion_date("2024-06-01T09:00:00")
        finally:
            other.close()

        store = SettingsStore(db, clock=clock)
        real_get_record = store._get_record
        calls = []

        def first_lookup_misses():
            # הבקשה קראה לפני שהכתיבה המקבילה הסתיימה
            calls.append(1)
            return None if len(calls) == 1 else real_get_record()

        monkeypatch.setattr(store, "_get_record", first_lookup_misses)

        assert store.set_default_completion_date("2024-07-01T09:00:00") == datetime(2024, 7, 1, 9, 0)
        assert db.query(AdminSetting).count() == 1
        assert SettingsStore(db, clock=clock).get_default_completion_date() == datetime(2024, 7, 1, 9, 0)
