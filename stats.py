"""Report figures computed from the booking store.

Everything here is derived by querying the store again, nothing is cached.
"""

from typing import Optional
from datetime import date, timedelta
import logging

from pydantic import BaseModel

from models import BookingStatus, BookingFilter, UserRole
from storage import BookingStore

logger = logging.getLogger(__name__)


class RoomBookingCount(BaseModel):
    room_id: int
    room_name: str
    count: int


class UserBookingSummary(BaseModel):
    id: int
    email: str
    role: UserRole
    total_bookings: int
    approved: int
    rejected: int


class Trends(BaseModel):
    # percentage change against the previous window, None when that window had no bookings
    computed: bool = True
    period_days: int
    current_start: date
    current_end: date
    previous_start: date
    previous_end: date
    total: Optional[float]
    approved: Optional[float]
    rejected: Optional[float]


class BookingStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    bookings_by_room: list[RoomBookingCount]
    top_users: list[UserBookingSummary]
    trends: Trends


def percent_change(current: int, previous: int) -> Optional[float]:
    if previous == 0:
        return None
    return round((current - previous) / previous * 100, 1)


def count_by_room(store: BookingStore) -> list[RoomBookingCount]:
    """One entry per room, in room order. Rooms nobody booked report 0."""
    return [
        RoomBookingCount(
            room_id=room.id,
            room_name=room.name,
            count=len(store.get_bookings_by_room(room.id)),
        )
        for room in store.get_all_rooms()
    ]


def top_users(store: BookingStore, limit: int = 5) -> list[UserBookingSummary]:
    """
    Users with at least one booking, busiest first.

    The sort is stable and starts from user creation order, so of two users
    with the same total the one registered first comes first.
    """
    summaries = []
    for user in store.get_all_users():
        bookings = store.get_bookings_by_user(user.id)
        if not bookings:
            continue
        summaries.append(UserBookingSummary(
            id=user.id,
            email=user.email,
            role=user.role,
            total_bookings=len(bookings),
            approved=sum(1 for b in bookings if b.status == BookingStatus.approved),
            rejected=sum(1 for b in bookings if b.status == BookingStatus.rejected),
        ))

    summaries.sort(key=lambda summary: summary.total_bookings, reverse=True)
    return summaries[:limit]


def compute_trends(store: BookingStore, today: date, period_days: int) -> Trends:
    """
    Compare the last `period_days` days (ending today, by booking date)
    with the same number of days right before them.
    """
    current_end = today
    current_start = today - timedelta(days=period_days - 1)
    previous_end = current_start - timedelta(days=1)
    previous_start = previous_end - timedelta(days=period_days - 1)

    def window(start: date, end: date, status: Optional[BookingStatus] = None) -> int:
        criteria = BookingFilter(date_from=start.isoformat(), date_to=end.isoformat(), status=status)
        return len(store.find_bookings(criteria))

    trends = Trends(
        period_days=period_days,
        current_start=current_start,
        current_end=current_end,
        previous_start=previous_start,
        previous_end=previous_end,
        total=percent_change(
            window(current_start, current_end),
            window(previous_start, previous_end),
        ),
        approved=percent_change(
            window(current_start, current_end, BookingStatus.approved),
            window(previous_start, previous_end, BookingStatus.approved),
        ),
        rejected=percent_change(
            window(current_start, current_end, BookingStatus.rejected),
            window(previous_start, previous_end, BookingStatus.rejected),
        ),
    )
    logger.debug("Trends for %s..%s: %s", current_start, current_end, trends)
    return trends


def compute_stats(
    store: BookingStore,
    today: Optional[date] = None,
    period_days: Optional[int] = None,
    top_n: Optional[int] = None,
) -> BookingStats:
    today = today or date.today()
    if period_days is None:
        period_days = store.settings.trend_period_days
    if top_n is None:
        top_n = store.settings.top_users
    if period_days <= 0:
        raise ValueError("period_days must be positive")

    stats = BookingStats(
        total=len(store.get_all_bookings()),
        pending=len(store.get_bookings_by_status(BookingStatus.pending)),
        approved=len(store.get_bookings_by_status(BookingStatus.approved)),
        rejected=len(store.get_bookings_by_status(BookingStatus.rejected)),
        bookings_by_room=count_by_room(store),
        top_users=top_users(store, top_n),
        trends=compute_trends(store, today, period_days),
    )
    logger.info(
        "Stats computed - Total: %s, Pending: %s, Approved: %s, Rejected: %s",
        stats.total, stats.pending, stats.approved, stats.rejected,
    )
    return stats
