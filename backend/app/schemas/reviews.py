"""
Review request/response schemas.
"""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.db.models import MAX_RATING, MIN_RATING, REVIEW_TEXT_MAX_LENGTH


class SubmitReviewRequest(BaseModel):
    """Create or replace the caller's review of a movie."""

    movie_id: int = Field(..., alias="movieId")
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    review_text: str | None = Field(
        default=None,
        alias="reviewText",
        max_length=REVIEW_TEXT_MAX_LENGTH,
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("movie_id", "rating", mode="before")
    @classmethod
    def reject_booleans(cls, v: object) -> object:
        # JSON true/false would otherwise coerce to 1/0; numeric strings still pass
        if isinstance(v, bool):
            raise ValueError("must be an integer, not a boolean")
        return v


class ReviewResponse(BaseModel):
    """
    A single review.

    username is filled when listing by movie; title/poster_url when
    listing by user.
    """

    id: int
    movie_id: int
    user_id: int
    rating: int
    review_text: str | None = None
    created_at: datetime
    updated_at: datetime
    username: str | None = None
    title: str | None = None
    poster_url: str | None = None


class SubmitReviewResponse(BaseModel):
    message: str
    status: Literal["created", "updated"]
    review: ReviewResponse


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ReviewListResponse(BaseModel):
    """Paginated list of reviews."""

    reviews: list[ReviewResponse]
    pagination: Pagination


class SingleReviewResponse(BaseModel):
    review: ReviewResponse
