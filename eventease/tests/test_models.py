"""
Test database models.
"""
from datetime import date, timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventease.models.bookings import Booking, PaymentStatus
from eventease.models.events import Event, EventStatus
from eventease.models.registrations import Registration, RegistrationStatus
from eventease.models.social import EventLike, EventReview


class TestEventModel:
    """Test Event model."""

    def test_create_event_defaults(self, db_session: Session):
        """A new event starts pending with empty counters."""
        event = Event(
            name="Chess Open",
            category="other",
            venue="Hall A",
            city="Boston",
            event_date=date(2026, 11, 1),
            event_time="10:00 AM",
            booking_opening_date=date(2026, 10, 1),
            total_capacity=40,
            organizer_name="Chess Club",
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)

        assert len(event.id) == 36
        assert event.status == EventStatus.PENDING.value
        assert event.registered_count == 0
        assert event.likes == 0
        assert event.rating == 0
        assert event.created_at is not None

    def test_registration_percentage(self, make_event):
        """Percentage is rounded to two decimals."""
        event = make_event(total_capacity=3, registered_count=1)
        assert event.registration_percentage == 33.33

    @pytest.mark.parametrize(
        "registered,level",
        [(0, "low"), (49, "low"), (50, "medium"), (79, "medium"), (80, "filled"), (100, "filled")],
    )
    def test_progress_level(self, make_event, registered, level):
        """Progress thresholds sit at 50% and 80%."""
        event = make_event(total_capacity=100, registered_count=registered)
        assert event.progress_level == level

    def test_is_full(self, make_event):
        event = make_event(total_capacity=2, registered_count=2)
        assert event.is_full is True

    @pytest.mark.parametrize(
        "opening,is_open",
        [(None, True), (date.today() - timedelta(days=1), True), (date.today(), True), (date.today() + timedelta(days=1), False)],
    )
    def test_is_booking_open(self, opening, is_open):
        event = Event(name="Chess Open", booking_opening_date=opening)
        assert event.is_booking_open is is_open


class TestBookingModels:
    """Test Registration and Booking models."""

    def test_registration_links_event(self, db_session: Session, make_event):
        event = make_event(free_event=True)
        registration = Registration(
            event_id=event.id, user_id="u-1", full_name="Jane Doe", email="jane@mail.com"
        )
        db_session.add(registration)
        db_session.commit()
        db_session.refresh(registration)

        assert registration.status == RegistrationStatus.PENDING.value
        assert registration.group_size == 1
        assert registration.event.id == event.id

    def test_booking_reference_is_unique(self, db_session: Session, make_event):
        """Two bookings cannot share a reference."""
        event = make_event()
        for _ in range(2):
            db_session.add(
                Booking(
                    event_id=event.id,
                    user_id="u-1",
                    ticket_type="standard",
                    quantity=1,
                    total_amount=50,
                    payment_status=PaymentStatus.COMPLETED.value,
                    booking_reference="BK-SAME",
                )
            )
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()


class TestSocialModels:
    """Test like and review uniqueness."""

    def test_like_is_unique_per_user(self, db_session: Session, make_event):
        event = make_event()
        db_session.add(EventLike(event_id=event.id, user_id="u-1"))
        db_session.commit()

        db_session.add(EventLike(event_id=event.id, user_id="u-1"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_review_is_unique_per_user(self, db_session: Session, make_event):
        event = make_event()
        db_session.add(EventReview(event_id=event.id, user_id="u-1", rating=4))
        db_session.commit()

        db_session.add(EventReview(event_id=event.id, user_id="u-1", rating=2))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()
