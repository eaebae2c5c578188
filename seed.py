from typing import Optional
from datetime import date, timedelta
import logging

from config import load_settings, configure_logging
from models import UserCreate, RoomCreate, BookingCreate, BookingStatus, UserRole
from storage import BookingStore

logger = logging.getLogger(__name__)

DEFAULT_USERS = [
    UserCreate(email="admin@example.com", password="admin123", role=UserRole.admin, name="Admin User"),
    UserCreate(email="instructor@example.com", password="instructor123", role=UserRole.instructor, name="Instructor User"),
    UserCreate(email="student@example.com", password="student123", role=UserRole.student, name="Student User"),
]

DEFAULT_ROOMS = [
    RoomCreate(name="A101", capacity=30, building="A", floor=1),
    RoomCreate(name="A102", capacity=25, building="A", floor=1),
    RoomCreate(name="B201", capacity=40, building="B", floor=2),
    RoomCreate(name="C301", capacity=50, building="C", floor=3),
]


def seed_default_data(store: BookingStore, today: Optional[date] = None):
    """Fill an empty store with demo users, rooms and three bookings around `today`."""
    today = today or date.today()

    admin, instructor, student = [store.create_user(user) for user in DEFAULT_USERS]
    rooms = [store.create_room(room) for room in DEFAULT_ROOMS]

    # (room, user, days from today, start, end, reason, final status)
    bookings = [
        (rooms[0], student, 0, "14:00", "16:00", "Computer science lecture", BookingStatus.pending),
        (rooms[2], instructor, 1, "10:00", "12:00", "Staff meeting", BookingStatus.approved),
        (rooms[3], student, 2, "09:00", "11:00", "Group study", BookingStatus.rejected),
    ]
    for room, user, offset, start, end, reason, status in bookings:
        booking = store.create_booking(BookingCreate(
            room_id=room.id,
            user_id=user.id,
            date=(today + timedelta(days=offset)).isoformat(),
            start_time=start,
            end_time=end,
            reason=reason,
        ))
        if status != BookingStatus.pending:
            store.update_booking_status(booking.id, status)

    logger.info("Seeded %d users, %d rooms, %d bookings", len(DEFAULT_USERS), len(rooms), len(bookings))


# This allows a quick look at the store with "python seed.py"
if __name__ == "__main__":
    from stats import compute_stats

    settings = load_settings()
    configure_logging(settings.log_level)
    store = BookingStore(settings=settings)
    seed_default_data(store)
    logger.info("Stats: %s", compute_stats(store).model_dump_json(indent=2))
