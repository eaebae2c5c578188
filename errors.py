"""Typed failures raised by the booking store.

Lookups never raise these; they return None. Only mutations do, and the
caller decides how to present them (HTTP status, message, ...).
"""


class BookingStoreError(Exception):
    """Base class for every failure reported by the store."""


class NotFoundError(BookingStoreError):
    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} {entity_id} not found")


class InvalidReferenceError(NotFoundError):
    """A booking names a room or user that does not exist."""


class ConflictError(BookingStoreError):
    """A unique value (user email, room name) is already taken."""


class BookingConflictError(ConflictError):
    def __init__(self, room_id: int, date: str, existing_booking_id: int):
        self.room_id = room_id
        self.date = date
        self.existing_booking_id = existing_booking_id
        super().__init__(
            f"Booking conflict, room {room_id} already booked on {date} "
            f"(booking {existing_booking_id})"
        )
