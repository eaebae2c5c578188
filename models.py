from typing import Optional
from enum import Enum
from datetime import datetime, timezone
import re

from pydantic import BaseModel, field_validator, model_validator
from sqlmodel import SQLModel, Field

# Each entity follows the same layout:
#   <Entity>Base   - fields shared by every variant
#   <Entity>       - the SQL table (table=True models do not run validation)
#   <Entity>Create - what callers send in, validated on construction
#   <Entity>Public - what callers get back

TIME_PATTERN = re.compile(r'^\d{2}:\d{2}$')
DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


class UserRole(str, Enum):
    admin = "admin"
    instructor = "instructor"
    student = "student"


class BookingStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# ---------- users ----------

class UserBase(SQLModel):
    email: str = Field(unique=True, index=True, min_length=1)
    role: UserRole = Field(default=UserRole.student)
    name: str = Field(min_length=1)


class User(UserBase, table=True):
    __tablename__ = "users"
    # AUTOINCREMENT: ids are never handed out twice
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    password: str


class UserCreate(UserBase):
    password: str = Field(min_length=1)


class UserPublic(UserBase):
    id: int


# ---------- rooms ----------

class RoomBase(SQLModel):
    name: str = Field(unique=True, min_length=1)
    capacity: int = Field(gt=0)
    building: str
    floor: int


class Room(RoomBase, table=True):
    __tablename__ = "rooms"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)


class RoomCreate(RoomBase):
    pass


class RoomPublic(RoomBase):
    id: int


# ---------- bookings ----------

class BookingBase(SQLModel):
    room_id: int = Field(foreign_key="rooms.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    date: str = Field(index=True)  # YYYY-MM-DD
    start_time: str  # HH:MM, 24h
    end_time: str  # HH:MM, 24h
    reason: str = Field(min_length=1)


class Booking(BookingBase, table=True):
    __tablename__ = "bookings"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    status: BookingStatus = Field(default=BookingStatus.pending, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BookingCreate(BookingBase):
    """
    A booking request as it reaches the store.

    - **date**: Format YYYY-MM-DD
    - **start_time** / **end_time**: Format HH:MM (24h), end must be after start

    Status, id and creation time are assigned by the store.
    """

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        if not DATE_PATTERN.match(value):
            raise ValueError("Invalid date format, use YYYY-MM-DD")
        try:
            datetime.strptime(value, "%Y-%m-%d")
        except ValueError:
            raise ValueError("Invalid date format, use YYYY-MM-DD")
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Invalid time format, use HH:MM")
        try:
            datetime.strptime(value, "%H:%M")
        except ValueError:
            raise ValueError("Invalid time format, use HH:MM")
        return value

    @model_validator(mode="after")
    def check_time_order(self):
        # zero padded HH:MM strings compare in clock order
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class BookingPublic(BookingBase):
    id: int
    status: BookingStatus
    created_at: datetime


class BookingWithDetails(BookingPublic):
    room: RoomPublic
    user: UserPublic


class BookingFilter(BaseModel):
    """Optional equality constraints, all combined with AND. None means "any"."""

    user_id: Optional[int] = None
    room_id: Optional[int] = None
    date: Optional[str] = None
    status: Optional[BookingStatus] = None
    # inclusive YYYY-MM-DD bounds
    date_from: Optional[str] = None
    date_to: Optional[str] = None
