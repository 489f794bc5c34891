from datetime import datetime

from pydantic import BaseModel, Field


class LikeOut(BaseModel):
    event_id: str
    liked: bool
    likes: int


class ReviewRequest(BaseModel):
    # 0 means "no rating selected" and is rejected by the review service
    rating: int = Field(ge=0, le=5)
    comment: str | None = Field(default=None, max_length=2000)


class ReviewOut(BaseModel):
    id: str
    event_id: str | None
    user_id: str | None
    rating: int
    comment: str | None
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True


class ReviewWithAuthorOut(ReviewOut):
    user_email: str


class ReviewSubmitOut(BaseModel):
    review: ReviewOut
    created: bool
    event_rating: float
