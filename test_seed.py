import pytest
import logging
from datetime import date

from config import Settings, load_settings
from database import make_engine
from errors import ConflictError
from models import BookingStatus, UserRole
from seed import seed_default_data
from storage import BookingStore

# Disable logging during tests for cleaner output
logging.disable(logging.CRITICAL)


@pytest.fixture(name="store")
def store_fixture():
    return BookingStore(engine=make_engine("sqlite://"), settings=Settings())


# Test 1: Seeding fills the store through the normal create operations
def test_seed_default_data(store):
    seed_default_data(store, today=date(2026, 10, 19))

    assert [user.role for user in store.get_all_users()] == [
        UserRole.admin, UserRole.instructor, UserRole.student,
    ]
    assert [room.name for room in store.get_all_rooms()] == ["A101", "A102", "B201", "C301"]

    bookings = store.get_all_bookings_with_details()
    assert [b.date for b in bookings] == ["2026-10-19", "2026-10-20", "2026-10-21"]
    assert [b.status for b in bookings] == [
        BookingStatus.pending, BookingStatus.approved, BookingStatus.rejected,
    ]
    assert bookings[1].user.email == "instructor@example.com"


# Test 2: A store is never seeded behind the caller's back
def test_new_store_is_empty(store):
    assert store.get_all_users() == []
    assert store.get_all_rooms() == []


# Test 3: Seeding twice runs into the unique emails
def test_seed_twice(store):
    seed_default_data(store)

    with pytest.raises(ConflictError):
        seed_default_data(store)


# Test 4: Settings come from ROOMBOOK_* environment variables
def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("ROOMBOOK_REJECT_OVERLAPS", "false")
    monkeypatch.setenv("ROOMBOOK_TOP_USERS", "3")
    monkeypatch.delenv("ROOMBOOK_TREND_PERIOD_DAYS", raising=False)

    settings = load_settings()

    assert settings.reject_overlaps is False
    assert settings.top_users == 3
    assert settings.trend_period_days == 30
