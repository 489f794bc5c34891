from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, model_validator

from eventease.models.events import EventCategory


# ---------- Event ----------
class EventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    category: EventCategory
    description: str | None = None
    short_description: str | None = Field(default=None, max_length=500)
    image_url: str | None = None
    venue: str = Field(min_length=1, max_length=200)
    city: str = Field(min_length=1, max_length=100)
    event_date: date
    event_time: str = Field(min_length=1, max_length=32)
    booking_opening_date: date
    total_capacity: int = Field(ge=1)
    free_event: bool = True
    price_standard: float | None = Field(default=None, ge=0)
    price_vip: float | None = Field(default=None, ge=0)
    price_group: float | None = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)
    organizer_name: str = Field(min_length=1, max_length=200)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(default=None, max_length=32)

    @model_validator(mode="after")
    def check_prices(self):
        if not self.free_event and not any((self.price_standard, self.price_vip, self.price_group)):
            raise ValueError("Paid events need at least one ticket price")
        return self


class EventOut(BaseModel):
    id: str
    name: str
    category: str
    description: str | None
    short_description: str | None
    image_url: str | None
    venue: str
    city: str
    event_date: date
    event_time: str
    booking_opening_date: date
    total_capacity: int
    registered_count: int
    free_event: bool
    price_standard: float | None
    price_vip: float | None
    price_group: float | None
    status: str
    rejection_reason: str | None = None
    approved_at: datetime | None = None
    featured: bool
    trending: bool
    tags: list[str] | None
    likes: int
    rating: float
    organizer_id: str | None
    organizer_name: str
    contact_email: str | None
    contact_phone: str | None
    created_at: datetime | None
    updated_at: datetime | None

    registration_percentage: float
    progress_level: str
    is_full: bool
    is_booking_open: bool

    class Config:
        from_attributes = True


class EventPage(BaseModel):
    items: list[EventOut]
    total: int
    page: int
    page_size: int
    pages: int


class CategoryOut(BaseModel):
    id: str
    name: str


# ---------- Moderation ----------
class ModerationRequest(BaseModel):
    status: Literal["approved", "rejected"]
    # Required when rejecting
    reason: str | None = Field(default=None, max_length=1000)


class AdminEventBuckets(BaseModel):
    pending: list[EventOut]
    approved: list[EventOut]
    rejected: list[EventOut]


class ModerationSummaryOut(BaseModel):
    pending: int
    approved: int
    rejected: int
    total: int
