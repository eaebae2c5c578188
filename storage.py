"""The booking store: users, rooms and bookings behind one lock.

`BookingStore` is the only thing that writes to the three tables. Reads
return detached records (or None when an id is unknown), writes validate
their references first and raise the errors from `errors.py`.

Every public method holds the store lock for its whole duration, so a
check followed by a write (email uniqueness, overlap detection, status
update) can never interleave with another call. Status updates are
last-write-wins; there is no version check.
"""

from typing import Optional, Union
from datetime import datetime, timezone
import logging
import threading

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, col

from config import Settings, load_settings
from database import make_engine, create_db_and_tables, drop_db_and_tables, new_session
from errors import ConflictError, InvalidReferenceError, NotFoundError, BookingConflictError
from models import (
    User, UserCreate, UserPublic,
    Room, RoomCreate, RoomPublic,
    Booking, BookingCreate, BookingStatus, BookingWithDetails, BookingFilter,
)
from timeslots import overlaps

logger = logging.getLogger(__name__)

# statuses that hold on to their slot, a rejected booking frees it
BLOCKING_STATUSES = (BookingStatus.pending, BookingStatus.approved)


class BookingStore:
    def __init__(self, engine: Optional[Engine] = None, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()
        self._engine = engine or make_engine(self.settings.database_url, echo=self.settings.echo_sql)
        self._lock = threading.RLock()
        create_db_and_tables(self._engine)

    def reset(self):
        """Drop every record and restart the id counters at 1."""
        with self._lock:
            drop_db_and_tables(self._engine)
            create_db_and_tables(self._engine)
            logger.info("Booking store reset")

    # ---------- users ----------

    def create_user(self, data: Union[UserCreate, dict]) -> User:
        data = UserCreate.model_validate(data)
        with self._lock, new_session(self._engine) as session:
            if self._user_by_email(session, data.email) is not None:
                logger.warning("User creation rejected: email %s already registered", data.email)
                raise ConflictError(f"User with email {data.email} already exists")

            user = User.model_validate(data)
            self._insert(session, user, f"User with email {data.email} already exists")
            logger.info("User created - ID: %s, Role: %s", user.id, user.role.value)
            return user

    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock, new_session(self._engine) as session:
            return session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock, new_session(self._engine) as session:
            return self._user_by_email(session, email)

    def get_all_users(self) -> list[User]:
        with self._lock, new_session(self._engine) as session:
            return list(session.exec(select(User).order_by(User.id)).all())

    # ---------- rooms ----------

    def create_room(self, data: Union[RoomCreate, dict]) -> Room:
        data = RoomCreate.model_validate(data)
        with self._lock, new_session(self._engine) as session:
            existing = session.exec(select(Room).where(Room.name == data.name)).first()
            if existing is not None:
                logger.warning("Room creation rejected: name %s already used", data.name)
                raise ConflictError(f"Room {data.name} already exists")

            room = Room.model_validate(data)
            self._insert(session, room, f"Room {data.name} already exists")
            logger.info("Room created - ID: %s, Name: %s", room.id, room.name)
            return room

    def get_room(self, room_id: int) -> Optional[Room]:
        with self._lock, new_session(self._engine) as session:
            return session.get(Room, room_id)

    def get_all_rooms(self) -> list[Room]:
        with self._lock, new_session(self._engine) as session:
            return list(session.exec(select(Room).order_by(Room.id)).all())

    # ---------- bookings: writes ----------

    def create_booking(self, data: Union[BookingCreate, dict]) -> Booking:
        data = BookingCreate.model_validate(data)
        with self._lock, new_session(self._engine) as session:
            if session.get(User, data.user_id) is None:
                logger.warning("Booking rejected: user %s does not exist", data.user_id)
                raise InvalidReferenceError("user", data.user_id)
            if session.get(Room, data.room_id) is None:
                logger.warning("Booking rejected: room %s does not exist", data.room_id)
                raise InvalidReferenceError("room", data.room_id)

            if self.settings.reject_overlaps:
                clash = self._find_clash(session, data)
                if clash is not None:
                    logger.warning(
                        "Booking conflict detected - Room: %s, Date: %s, %s-%s overlaps booking %s",
                        data.room_id, data.date, data.start_time, data.end_time, clash.id,
                    )
                    raise BookingConflictError(data.room_id, data.date, clash.id)

            booking = Booking(
                **data.model_dump(),
                status=BookingStatus.pending,
                created_at=datetime.now(timezone.utc),
            )
            session.add(booking)
            session.commit()
            session.refresh(booking)
            logger.info(
                "Booking created - ID: %s, Room: %s, User: %s, Date: %s %s-%s",
                booking.id, booking.room_id, booking.user_id,
                booking.date, booking.start_time, booking.end_time,
            )
            return booking

    def update_booking_status(self, booking_id: int, status: Union[BookingStatus, str]) -> Booking:
        """Set a booking's status. Any status can follow any other."""
        status = BookingStatus(status)
        with self._lock, new_session(self._engine) as session:
            booking = session.get(Booking, booking_id)
            if booking is None:
                raise NotFoundError("booking", booking_id)

            booking.status = status
            session.add(booking)
            session.commit()
            session.refresh(booking)
            logger.info("Booking %s status set to %s", booking_id, status.value)
            return booking

    # ---------- bookings: reads ----------

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        with self._lock, new_session(self._engine) as session:
            return session.get(Booking, booking_id)

    def get_booking_with_details(self, booking_id: int) -> Optional[BookingWithDetails]:
        with self._lock, new_session(self._engine) as session:
            booking = session.get(Booking, booking_id)
            if booking is None:
                return None
            return self._attach_details(session, booking)

    def find_bookings(self, criteria: Optional[BookingFilter] = None, **constraints) -> list[Booking]:
        """
        Return every booking matching all the given constraints, in creation order.

        Pass either a BookingFilter or its fields as keywords, not both:
        `store.find_bookings(room_id=1, date="2025-12-10")`
        """
        criteria = _build_filter(criteria, constraints)
        with self._lock, new_session(self._engine) as session:
            bookings = list(session.exec(_select_bookings(criteria)).all())
        logger.debug("Query %s matched %d booking(s)", criteria, len(bookings))
        return bookings

    def find_bookings_with_details(
        self, criteria: Optional[BookingFilter] = None, **constraints
    ) -> list[BookingWithDetails]:
        criteria = _build_filter(criteria, constraints)
        with self._lock, new_session(self._engine) as session:
            results = []
            for booking in session.exec(_select_bookings(criteria)).all():
                detailed = self._attach_details(session, booking)
                if detailed is None:
                    logger.warning(
                        "Booking %s left out of detailed results: room %s or user %s is missing",
                        booking.id, booking.room_id, booking.user_id,
                    )
                    continue
                results.append(detailed)
            return results

    def get_all_bookings(self) -> list[Booking]:
        return self.find_bookings(BookingFilter())

    def get_all_bookings_with_details(self) -> list[BookingWithDetails]:
        return self.find_bookings_with_details(BookingFilter())

    def get_bookings_by_user(self, user_id: int) -> list[Booking]:
        return self.find_bookings(BookingFilter(user_id=user_id))

    def get_bookings_by_user_with_details(self, user_id: int) -> list[BookingWithDetails]:
        return self.find_bookings_with_details(BookingFilter(user_id=user_id))

    def get_bookings_by_room(self, room_id: int) -> list[Booking]:
        return self.find_bookings(BookingFilter(room_id=room_id))

    def get_bookings_by_room_with_details(self, room_id: int) -> list[BookingWithDetails]:
        return self.find_bookings_with_details(BookingFilter(room_id=room_id))

    def get_bookings_by_date(self, date: str) -> list[Booking]:
        return self.find_bookings(BookingFilter(date=date))

    def get_bookings_by_date_with_details(self, date: str) -> list[BookingWithDetails]:
        return self.find_bookings_with_details(BookingFilter(date=date))

    def get_bookings_by_status(self, status: Union[BookingStatus, str]) -> list[Booking]:
        criteria = _status_filter(status)
        if criteria is None:
            return []
        return self.find_bookings(criteria)

    def get_bookings_by_status_with_details(self, status: Union[BookingStatus, str]) -> list[BookingWithDetails]:
        criteria = _status_filter(status)
        if criteria is None:
            return []
        return self.find_bookings_with_details(criteria)

    # ---------- helpers (callers hold the lock) ----------

    @staticmethod
    def _user_by_email(session: Session, email: str) -> Optional[User]:
        return session.exec(select(User).where(User.email == email)).first()

    @staticmethod
    def _insert(session: Session, record, conflict_message: str):
        # the unique constraints back up the explicit checks, e.g. when
        # another process shares a file database
        session.add(record)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ConflictError(conflict_message)
        session.refresh(record)

    @staticmethod
    def _find_clash(session: Session, data: BookingCreate) -> Optional[Booking]:
        statement = select(Booking).where(
            Booking.room_id == data.room_id,
            Booking.date == data.date,
            col(Booking.status).in_(BLOCKING_STATUSES),
        ).order_by(Booking.id)
        for existing in session.exec(statement).all():
            if overlaps(data.start_time, data.end_time, existing.start_time, existing.end_time):
                return existing
        return None

    @staticmethod
    def _attach_details(session: Session, booking: Booking) -> Optional[BookingWithDetails]:
        room = session.get(Room, booking.room_id)
        user = session.get(User, booking.user_id)
        if room is None or user is None:
            return None
        return BookingWithDetails(
            **booking.model_dump(),
            room=RoomPublic.model_validate(room.model_dump()),
            user=UserPublic.model_validate(user.model_dump()),
        )


def _build_filter(criteria: Optional[BookingFilter], constraints: dict) -> BookingFilter:
    if criteria is None:
        return BookingFilter(**constraints)
    if constraints:
        raise TypeError("Pass a BookingFilter or keyword constraints, not both")
    return criteria


def _select_bookings(criteria: BookingFilter):
    statement = select(Booking)
    if criteria.user_id is not None:
        statement = statement.where(Booking.user_id == criteria.user_id)
    if criteria.room_id is not None:
        statement = statement.where(Booking.room_id == criteria.room_id)
    if criteria.date is not None:
        statement = statement.where(Booking.date == criteria.date)
    if criteria.status is not None:
        statement = statement.where(Booking.status == criteria.status)
    # ISO dates sort the same as strings
    if criteria.date_from is not None:
        statement = statement.where(Booking.date >= criteria.date_from)
    if criteria.date_to is not None:
        statement = statement.where(Booking.date <= criteria.date_to)
    return statement.order_by(Booking.id)


def _status_filter(status) -> Optional[BookingFilter]:
    # an unknown status simply matches nothing
    try:
        return BookingFilter(status=BookingStatus(status))
    except ValueError:
        logger.debug("Unknown booking status %r, nothing to match", status)
        return None
