import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eventease.core.errors import ResourceBusy, StoreError, ValidationError
from eventease.core.locks import like_lock_key, resource_lock, review_lock_key
from eventease.models.events import Event
from eventease.models.social import EventLike, EventReview
from eventease.models.users import User
from eventease.services import catalog
from eventease.services.accounts import Actor

logger = logging.getLogger(__name__)

ANONYMOUS = "Anonymous User"


# ---------- Derived counters ----------
def recount_likes(db: Session, event_id: str) -> int:
    """Recompute events.likes from event_likes inside the caller's transaction."""
    count = select(func.count(EventLike.id)).where(EventLike.event_id == event_id).scalar_subquery()
    db.execute(
        update(Event).where(Event.id == event_id).values(likes=count).execution_options(synchronize_session=False)
    )
    return int(db.scalar(select(Event.likes).where(Event.id == event_id)) or 0)


def recompute_rating(db: Session, event_id: str) -> float:
    """Recompute events.rating as the one-decimal average of its reviews."""
    average = (
        select(func.round(func.avg(EventReview.rating), 1))
        .where(EventReview.event_id == event_id)
        .scalar_subquery()
    )
    db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(rating=func.coalesce(average, 0))
        .execution_options(synchronize_session=False)
    )
    return float(db.scalar(select(Event.rating).where(Event.id == event_id)) or 0)


# ---------- Likes ----------
def toggle_like(db: Session, actor: Actor, *, event_id: str) -> dict:
    """
    Delete the actor's like if it exists, otherwise insert it.
    The delete doubles as the existence check, so there is no separate read.
    """
    catalog.get_event(db, event_id)

    with resource_lock(like_lock_key(event_id, actor.user_id)):
        try:
            res = db.execute(
                delete(EventLike).where(EventLike.event_id == event_id, EventLike.user_id == actor.user_id)
            )
            liked = res.rowcount == 0  # type: ignore
            if liked:
                db.add(EventLike(event_id=event_id, user_id=actor.user_id))
                db.flush()
            likes = recount_likes(db, event_id)
            db.commit()
        except IntegrityError:
            # A concurrent toggle inserted the same pair first; the event is liked.
            db.rollback()
            liked = True
            try:
                likes = recount_likes(db, event_id)
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Failed to recount likes on %s", event_id)
                raise StoreError("Failed to update like status. Please try again.")
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to toggle like on %s for %s", event_id, actor.user_id)
            raise StoreError("Failed to update like status. Please try again.")

    logger.info("Event %s %s by %s", event_id, "liked" if liked else "unliked", actor.user_id)
    return {"event_id": event_id, "liked": liked, "likes": likes}


def is_liked(db: Session, actor: Actor, *, event_id: str) -> bool:
    stmt = select(func.count(EventLike.id)).where(
        EventLike.event_id == event_id, EventLike.user_id == actor.user_id
    )
    return bool(db.scalar(stmt))


def user_likes(db: Session, actor: Actor) -> list[Event]:
    stmt = (
        select(Event)
        .join(EventLike, EventLike.event_id == Event.id)
        .where(EventLike.user_id == actor.user_id)
        .order_by(EventLike.created_at.desc())
    )
    return list(db.scalars(stmt))


# ---------- Reviews ----------
def validate_rating(rating: int | None) -> int:
    if not rating:
        raise ValidationError("Please select a rating before submitting.", title="Rating Required")
    if not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5.", title="Rating Required")
    return rating


def submit_review(db: Session, actor: Actor, *, event_id: str, rating: int, comment: str | None = None) -> dict:
    """Create the actor's review for an event, or update it in place if one exists."""
    rating = validate_rating(rating)
    comment = (comment or "").strip() or None
    catalog.get_event(db, event_id)

    with resource_lock(review_lock_key(event_id, actor.user_id)):
        try:
            review = db.scalar(
                select(EventReview).where(EventReview.event_id == event_id, EventReview.user_id == actor.user_id)
            )
            created = review is None
            if created:
                review = EventReview(event_id=event_id, user_id=actor.user_id, rating=rating, comment=comment)
                db.add(review)
            else:
                review.rating = rating
                review.comment = comment
                review.updated_at = func.now()
            db.flush()
            event_rating = recompute_rating(db, event_id)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ResourceBusy("Your review is already being saved. Please try again.")
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to save review on %s for %s", event_id, actor.user_id)
            raise StoreError("Failed to submit review. Please try again.")

    db.refresh(review)
    logger.info("Review %s %s for event %s", review.id, "created" if created else "updated", event_id)
    return {"review": review, "created": created, "event_rating": event_rating}


def event_reviews(db: Session, *, event_id: str) -> list[dict]:
    """Reviews for an approved event, newest first, each with its author's email."""
    catalog.get_event(db, event_id)
    stmt = (
        select(EventReview, User.email)
        .outerjoin(User, User.id == EventReview.user_id)
        .where(EventReview.event_id == event_id)
        .order_by(EventReview.created_at.desc())
    )
    return [
        {
            "id": review.id,
            "event_id": review.event_id,
            "user_id": review.user_id,
            "rating": review.rating,
            "comment": review.comment,
            "created_at": review.created_at,
            "updated_at": review.updated_at,
            "user_email": email or ANONYMOUS,
        }
        for review, email in db.execute(stmt)
    ]


def user_review(db: Session, actor: Actor, *, event_id: str) -> EventReview | None:
    return db.scalar(
        select(EventReview).where(EventReview.event_id == event_id, EventReview.user_id == actor.user_id)
    )


def user_reviews(db: Session, actor: Actor) -> list[EventReview]:
    stmt = select(EventReview).where(EventReview.user_id == actor.user_id).order_by(EventReview.created_at.desc())
    return list(db.scalars(stmt))
