"""
Community rating aggregate for a movie.

Always computed from the live review rows; nothing is cached or stored,
so the value reflects the latest committed writes at read time.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.models import Review


def get_rating_summary(db: Session, movie_id: int) -> dict:
    """
    Return {"average_rating": float, "review_count": int} for *movie_id*.

    average_rating is 0.0 (never None) when the movie has no reviews.
    """
    average, count = (
        db.query(func.avg(Review.rating), func.count(Review.id))
        .filter(Review.movie_id == movie_id)
        .one()
    )
    return {
        "average_rating": float(average) if average is not None else 0.0,
        "review_count": int(count or 0),
    }
