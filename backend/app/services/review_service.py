"""
Movie review business logic.

submit_review is an upsert keyed by the (movie_id, user_id) unique
constraint: the INSERT is attempted inside a SAVEPOINT and a constraint
violation turns into an in-place UPDATE of the existing row. There is no
"does a review exist?" read beforehand, so two concurrent submissions by
the same user can never produce two rows.
"""
import logging
import math
from datetime import datetime, timezone

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models import (
    MAX_RATING,
    MIN_RATING,
    REVIEW_TEXT_MAX_LENGTH,
    Movie,
    Review,
    User,
)
from app.services.movie_service import MovieNotFoundError, get_movie

logger = logging.getLogger(__name__)

STATUS_CREATED = "created"
STATUS_UPDATED = "updated"


# ── Custom exceptions ────────────────────────────────────────────────────────


class InvalidReviewError(ValueError):
    """Raised when rating or review text fails validation."""


class ReviewNotFoundError(Exception):
    """Raised when a user has no review for the given movie."""


class UserNotFoundError(Exception):
    """Raised when a user id does not reference an existing user."""


# ── Helpers ──────────────────────────────────────────────────────────────────


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_review_input(rating: object, review_text: str | None) -> None:
    """Check rating is an int in range and text fits. Touches no storage."""
    # bool is an int subclass; True must not count as a rating of 1
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidReviewError("Rating must be an integer")
    if rating < MIN_RATING or rating > MAX_RATING:
        raise InvalidReviewError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    if review_text is not None and len(review_text) > REVIEW_TEXT_MAX_LENGTH:
        raise InvalidReviewError(
            f"Review text must be at most {REVIEW_TEXT_MAX_LENGTH} characters"
        )


def _build_review_dict(
    review: Review,
    username: str | None = None,
    title: str | None = None,
    poster_url: str | None = None,
) -> dict:
    return {
        "id": review.id,
        "movie_id": review.movie_id,
        "user_id": review.user_id,
        "rating": review.rating,
        "review_text": review.review_text,
        "created_at": review.created_at,
        "updated_at": review.updated_at,
        "username": username,
        "title": title,
        "poster_url": poster_url,
    }


def _pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


# ── Write path ───────────────────────────────────────────────────────────────


def submit_review(
    db: Session,
    user_id: int,
    movie_id: int,
    rating: int,
    review_text: str | None = None,
) -> dict:
    """
    Create the user's review of a movie, or replace it if one exists.

    Returns {"status": "created" | "updated", "review": {...}}.

    Raises:
        InvalidReviewError: rating outside 1-5 / not an int, text too long.
        MovieNotFoundError: movie_id does not exist.
    """
    validate_review_input(rating, review_text)

    if get_movie(db, movie_id) is None:
        raise MovieNotFoundError(movie_id)

    review = Review(
        movie_id=movie_id,
        user_id=user_id,
        rating=rating,
        review_text=review_text,
    )
    try:
        with db.begin_nested():
            db.add(review)
            db.flush()
        status = STATUS_CREATED
    except IntegrityError:
        # The savepoint is rolled back; the outer transaction is still usable.
        result = db.execute(
            update(Review)
            .where(Review.movie_id == movie_id, Review.user_id == user_id)
            .values(rating=rating, review_text=review_text, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Not a duplicate: FK or CHECK violation (e.g. movie deleted meanwhile)
            db.rollback()
            raise
        status = STATUS_UPDATED

    db.commit()

    saved = (
        db.query(Review)
        .filter(Review.movie_id == movie_id, Review.user_id == user_id)
        .populate_existing()
        .one()
    )
    logger.info(
        "Review %s id=%s movie=%s user=%s rating=%s",
        status, saved.id, movie_id, user_id, rating,
    )
    return {"status": status, "review": _build_review_dict(saved)}


def delete_review(db: Session, user_id: int, movie_id: int) -> None:
    """Delete the user's own review of a movie in a single statement."""
    deleted = (
        db.query(Review)
        .filter(Review.movie_id == movie_id, Review.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if deleted == 0:
        db.rollback()
        raise ReviewNotFoundError(f"No review by user {user_id} for movie {movie_id}")

    db.commit()
    logger.info("Review deleted movie=%s user=%s", movie_id, user_id)


# ── Read path ────────────────────────────────────────────────────────────────


def get_user_review(db: Session, user_id: int, movie_id: int) -> dict:
    row = (
        db.query(Review, User.username)
        .join(User, Review.user_id == User.id)
        .filter(Review.movie_id == movie_id, Review.user_id == user_id)
        .first()
    )
    if row is None:
        raise ReviewNotFoundError(f"No review by user {user_id} for movie {movie_id}")

    review, username = row
    return _build_review_dict(review, username=username)


def list_reviews_for_movie(
    db: Session,
    movie_id: int,
    page: int = 1,
    limit: int = 10,
) -> dict:
    """Reviews of one movie, most recently written first, with author names."""
    if get_movie(db, movie_id) is None:
        raise MovieNotFoundError(movie_id)

    total = (
        db.query(func.count(Review.id))
        .filter(Review.movie_id == movie_id)
        .scalar()
    )

    rows = (
        db.query(Review, User.username)
        .join(User, Review.user_id == User.id)
        .filter(Review.movie_id == movie_id)
        .order_by(Review.updated_at.desc(), Review.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "reviews": [_build_review_dict(review, username=username) for review, username in rows],
        "pagination": _pagination(page, limit, total),
    }


def list_reviews_by_user(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: int = 10,
) -> dict:
    """Reviews written by one user, most recent first, with movie title/poster."""
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise UserNotFoundError(f"User {user_id} not found")

    total = (
        db.query(func.count(Review.id))
        .filter(Review.user_id == user_id)
        .scalar()
    )

    rows = (
        db.query(Review, Movie.title, Movie.poster_url)
        .join(Movie, Review.movie_id == Movie.id)
        .filter(Review.user_id == user_id)
        .order_by(Review.updated_at.desc(), Review.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "reviews": [
            _build_review_dict(review, title=title, poster_url=poster_url)
            for review, title, poster_url in rows
        ],
        "pagination": _pagination(page, limit, total),
    }
