"""
Test likes and reviews.
"""
import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from eventease.core.errors import EventNotFound, ResourceBusy, StoreError, ValidationError
from eventease.core.locks import like_lock_key
from eventease.models.events import EventStatus
from eventease.models.social import EventLike, EventReview
from eventease.services import social


class TestLikes:
    """Test the like toggle and the derived like counter."""

    def test_toggle_round_trip(self, db_session: Session, user, make_event):
        """Liking then unliking leaves no row and a zero counter."""
        event = make_event()

        first = social.toggle_like(db_session, user, event_id=event.id)
        assert first == {"event_id": event.id, "liked": True, "likes": 1}
        assert social.is_liked(db_session, user, event_id=event.id) is True

        second = social.toggle_like(db_session, user, event_id=event.id)
        assert second == {"event_id": event.id, "liked": False, "likes": 0}
        assert social.is_liked(db_session, user, event_id=event.id) is False

        assert db_session.scalar(select(func.count(EventLike.id))) == 0
        db_session.refresh(event)
        assert event.likes == 0

    def test_counter_matches_rows(self, db_session: Session, make_user, make_event):
        event = make_event()
        fans = [make_user(f"fan{i}@mail.com") for i in range(3)]
        for fan in fans:
            social.toggle_like(db_session, fan, event_id=event.id)
        social.toggle_like(db_session, fans[0], event_id=event.id)

        db_session.refresh(event)
        rows = db_session.scalar(select(func.count(EventLike.id)).where(EventLike.event_id == event.id))
        assert event.likes == rows == 2

    def test_counter_recovers_from_drift(self, db_session: Session, user, make_event):
        """The counter is recomputed from rows, not incremented."""
        event = make_event(likes=41)

        result = social.toggle_like(db_session, user, event_id=event.id)

        assert result["likes"] == 1

    def test_like_pending_event(self, db_session: Session, user, make_event):
        event = make_event(status=EventStatus.PENDING.value)
        with pytest.raises(EventNotFound):
            social.toggle_like(db_session, user, event_id=event.id)

    def test_like_while_locked(self, db_session: Session, user, make_event, fake_redis, monkeypatch):
        """A toggle already in flight for the same pair makes the second one busy."""
        monkeypatch.setattr("eventease.core.locks.BLOCKING_TIMEOUT", 0.1)
        event = make_event()
        held = fake_redis.lock(like_lock_key(event.id, user.user_id), timeout=10)
        assert held.acquire(blocking=False)

        with pytest.raises(ResourceBusy):
            social.toggle_like(db_session, user, event_id=event.id)
        held.release()

        assert db_session.scalar(select(func.count(EventLike.id))) == 0

    def test_user_likes(self, db_session: Session, user, make_event):
        liked = make_event(name="Liked Show")
        make_event(name="Other Show")
        social.toggle_like(db_session, user, event_id=liked.id)

        assert [e.name for e in social.user_likes(db_session, user)] == ["Liked Show"]


class TestReviews:
    """Test review upsert and the derived rating."""

    @pytest.mark.parametrize("rating", [0, None])
    def test_rating_required(self, db_session: Session, user, make_event, rating):
        event = make_event()
        with pytest.raises(ValidationError, match="Please select a rating") as exc_info:
            social.submit_review(db_session, user, event_id=event.id, rating=rating)
        assert exc_info.value.title == "Rating Required"
        assert db_session.scalar(select(func.count(EventReview.id))) == 0

    def test_rating_out_of_range(self, db_session: Session, user, make_event):
        event = make_event()
        with pytest.raises(ValidationError):
            social.submit_review(db_session, user, event_id=event.id, rating=6)

    def test_second_submission_updates_in_place(self, db_session: Session, user, make_event):
        """Submitting twice keeps one review with the same id."""
        event = make_event()

        first = social.submit_review(db_session, user, event_id=event.id, rating=4, comment="Great")
        second = social.submit_review(db_session, user, event_id=event.id, rating=2, comment="  Meh  ")

        assert first["created"] is True
        assert second["created"] is False
        assert second["review"].id == first["review"].id
        assert second["review"].rating == 2
        assert second["review"].comment == "Meh"
        assert db_session.scalar(select(func.count(EventReview.id))) == 1
        assert second["event_rating"] == 2.0

    def test_rating_is_one_decimal_average(self, db_session: Session, make_user, make_event):
        event = make_event()
        for i, rating in enumerate([5, 4, 4]):
            social.submit_review(db_session, make_user(f"critic{i}@mail.com"), event_id=event.id, rating=rating)

        db_session.refresh(event)
        assert event.rating == 4.3

    def test_event_reviews_carry_author_email(self, db_session: Session, user, make_event):
        event = make_event()
        social.submit_review(db_session, user, event_id=event.id, rating=5, comment="Loved it")
        db_session.add(EventReview(event_id=event.id, user_id="deleted-user", rating=3))
        db_session.commit()

        reviews = social.event_reviews(db_session, event_id=event.id)

        emails = sorted(r["user_email"] for r in reviews)
        assert emails == [social.ANONYMOUS, "jane@mail.com"]

    def test_user_review(self, db_session: Session, user, make_event):
        event = make_event()
        assert social.user_review(db_session, user, event_id=event.id) is None

        social.submit_review(db_session, user, event_id=event.id, rating=3)

        assert social.user_review(db_session, user, event_id=event.id).rating == 3
        assert len(social.user_reviews(db_session, user)) == 1


def _disk_error(*args, **kwargs):
    raise OperationalError("COMMIT", {}, Exception("disk I/O error"))


class TestStoreFailures:
    """Test that store errors surface as StoreError and leave no partial writes."""

    def _fail_first_flush(self, db_session: Session, monkeypatch):
        """The first flush hits a unique violation, as if a concurrent toggle won the insert."""
        real_flush = db_session.flush
        calls = []

        def flush(*args, **kwargs):
            calls.append(1)
            if len(calls) == 1:
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
            return real_flush(*args, **kwargs)

        monkeypatch.setattr(db_session, "flush", flush)

    def test_like_commit_fails(self, db_session: Session, user, make_event, monkeypatch):
        event = make_event()
        monkeypatch.setattr(db_session, "commit", _disk_error)

        with pytest.raises(StoreError, match="Failed to update like status"):
            social.toggle_like(db_session, user, event_id=event.id)

        db_session.refresh(event)
        assert event.likes == 0
        assert db_session.scalar(select(func.count(EventLike.id))) == 0

    def test_lost_insert_race_reads_as_liked(self, db_session: Session, user, make_event, monkeypatch):
        event = make_event()
        self._fail_first_flush(db_session, monkeypatch)

        result = social.toggle_like(db_session, user, event_id=event.id)

        assert result["liked"] is True

    def test_recount_after_lost_race_fails(self, db_session: Session, user, make_event, monkeypatch):
        event = make_event()
        self._fail_first_flush(db_session, monkeypatch)
        monkeypatch.setattr(social, "recount_likes", _disk_error)

        with pytest.raises(StoreError, match="Failed to update like status"):
            social.toggle_like(db_session, user, event_id=event.id)

        db_session.refresh(event)
        assert event.likes == 0

    def test_review_commit_fails(self, db_session: Session, user, make_event, monkeypatch):
        event = make_event()
        monkeypatch.setattr(db_session, "commit", _disk_error)

        with pytest.raises(StoreError, match="Failed to submit review"):
            social.submit_review(db_session, user, event_id=event.id, rating=5, comment="Loved it")

        db_session.refresh(event)
        assert event.rating == 0
        assert db_session.scalar(select(func.count(EventReview.id))) == 0
