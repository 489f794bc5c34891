from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventease.database.db import get_db
from eventease.routes.deps import get_current_actor
from eventease.schemas.accounts import LoginRequest, ProfileOut, ProfileUpdate, SignupRequest, Token, UserOut
from eventease.services import accounts
from eventease.services.accounts import Actor

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserOut, status_code=201)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    user = accounts.signup(db, email=payload.email, password=payload.password, full_name=payload.full_name)
    return {"id": user.id, "email": user.email, "role": "user"}


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return {"access_token": accounts.login(db, email=payload.email, password=payload.password)}


@router.get("/me", response_model=UserOut)
def me(actor: Actor = Depends(get_current_actor)):
    return {"id": actor.user_id, "email": actor.email, "role": actor.role}


@router.get("/me/profile", response_model=ProfileOut)
def get_profile(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return accounts.get_profile(db, actor)


@router.put("/me/profile", response_model=ProfileOut)
def update_profile(
    payload: ProfileUpdate, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)
):
    return accounts.update_profile(db, actor, changes=payload.model_dump(exclude_unset=True))
