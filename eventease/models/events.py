import enum
import uuid
from datetime import date, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventease.database.db import Base


def new_id() -> str:
    return str(uuid.uuid4())


class EventStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EventCategory(str, enum.Enum):
    SPORTS = "sports"
    COLLEGE = "college"
    ENTERTAINMENT = "entertainment"
    CIRCUS = "circus"
    THEATER = "theater"
    MUSIC = "music"
    OTHER = "other"


class Event(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    short_description: Mapped[str | None] = mapped_column(String(500))
    image_url: Mapped[str | None] = mapped_column(String(500))
    venue: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    event_time: Mapped[str] = mapped_column(String(32), nullable=False)
    booking_opening_date: Mapped[date] = mapped_column(Date, nullable=False)

    total_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    registered_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    free_event: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    price_standard: Mapped[float | None] = mapped_column(Float, default=0)
    price_vip: Mapped[float | None] = mapped_column(Float, default=0)
    price_group: Mapped[float | None] = mapped_column(Float, default=0)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=EventStatus.PENDING.value, index=True)
    # Set by moderation
    rejection_reason: Mapped[str | None] = mapped_column(Text)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    trending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tags: Mapped[list[str] | None] = mapped_column(JSON, default=list)

    # Derived from event_likes / event_reviews; written only by recount queries
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    organizer_id: Mapped[str | None] = mapped_column(String(36), index=True)
    organizer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact_email: Mapped[str | None] = mapped_column(String(255))
    contact_phone: Mapped[str | None] = mapped_column(String(32))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())

    registrations: Mapped[list["Registration"]] = relationship(back_populates="event")
    bookings: Mapped[list["Booking"]] = relationship(back_populates="event")

    @property
    def registration_percentage(self) -> float:
        if not self.total_capacity:
            return 0.0
        return round((self.registered_count or 0) / self.total_capacity * 100, 2)

    @property
    def progress_level(self) -> str:
        percentage = self.registration_percentage
        if percentage >= 80:
            return "filled"
        if percentage >= 50:
            return "medium"
        return "low"

    @property
    def is_full(self) -> bool:
        return (self.registered_count or 0) >= self.total_capacity

    @property
    def is_booking_open(self) -> bool:
        return self.booking_opening_date is None or self.booking_opening_date <= date.today()
