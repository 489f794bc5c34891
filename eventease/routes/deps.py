from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from eventease.database.db import get_db
from eventease.services.accounts import Actor, actor_from_token

bearer = HTTPBearer(auto_error=False)


def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> Actor:
    """Resolve the bearer token; raises AuthenticationRequired before any handler work."""
    token = credentials.credentials if credentials else None
    return actor_from_token(db, token)
