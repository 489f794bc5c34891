import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eventease.core.errors import AuthenticationRequired, PermissionDenied, StoreError, ValidationError
from eventease.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from eventease.models.users import Profile, Role, User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, passed explicitly into every mutating operation."""

    user_id: str
    email: str
    role: str = Role.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise PermissionDenied()


def has_role(db: Session, user_id: str, role: str) -> bool:
    count = db.scalar(
        select(func.count(UserRole.id)).where(UserRole.user_id == user_id, UserRole.role == role)
    )
    return bool(count)


def _role_for(db: Session, user_id: str) -> str:
    return Role.ADMIN.value if has_role(db, user_id, Role.ADMIN.value) else Role.USER.value


def signup(db: Session, *, email: str, password: str, full_name: str | None = None) -> User:
    """Create an account with its profile and the default `user` role."""
    email = email.strip().lower()
    if db.scalar(select(User).where(User.email == email)):
        raise ValidationError("Email already registered.", title="Sign Up Failed")

    user = User(email=email, hashed_password=get_password_hash(password))
    db.add(user)
    try:
        db.flush()
        db.add(Profile(id=user.id, full_name=full_name))
        db.add(UserRole(user_id=user.id, role=Role.USER.value))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Email already registered.", title="Sign Up Failed")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to create account for %s", email)
        raise StoreError()
    db.refresh(user)
    logger.info("Account %s created", user.id)
    return user


def grant_role(db: Session, *, user_id: str, role: str) -> None:
    if has_role(db, user_id, role):
        return
    db.add(UserRole(user_id=user_id, role=role))
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to grant role %s to %s", role, user_id)
        raise StoreError()


def login(db: Session, *, email: str, password: str) -> str:
    """Return a bearer token for valid credentials."""
    user = db.scalar(select(User).where(User.email == email.strip().lower()))
    if not user or not verify_password(password, user.hashed_password):
        raise AuthenticationRequired("Invalid email or password.")
    return create_access_token(data={"sub": user.id})


def actor_from_token(db: Session, token: str | None) -> Actor:
    if not token:
        raise AuthenticationRequired()
    claims = decode_access_token(token)
    if not claims or not claims.get("sub"):
        raise AuthenticationRequired("Your session has expired. Please log in again.")

    user = db.get(User, claims["sub"])
    if user is None:
        raise AuthenticationRequired()
    return Actor(user_id=user.id, email=user.email, role=_role_for(db, user.id))


def get_profile(db: Session, actor: Actor) -> Profile:
    profile = db.get(Profile, actor.user_id)
    if profile is None:
        # accounts created before profiles existed
        profile = Profile(id=actor.user_id)
        db.add(profile)
        db.commit()
        db.refresh(profile)
    return profile


def update_profile(db: Session, actor: Actor, *, changes: dict) -> Profile:
    profile = get_profile(db, actor)
    for field in ("full_name", "avatar_url"):
        if field in changes:
            setattr(profile, field, changes[field])
    profile.updated_at = func.now()
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to update profile %s", actor.user_id)
        raise StoreError()
    db.refresh(profile)
    return profile
