"""
SQLAlchemy ORM models.

Column names and constraints match alembic/versions/0001_initial_schema.py.
Types are kept dialect-neutral so the same models run on SQLite (default,
tests) and PostgreSQL.

The (movie_id, user_id) unique constraint on reviews is what guarantees
one review per user per movie; services rely on it instead of a prior read.
"""
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Constants ─────────────────────────────────────────────────────────────────

MIN_RATING = 1
MAX_RATING = 5
REVIEW_TEXT_MAX_LENGTH = 1000


# ── Timestamp helper ──────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Models ────────────────────────────────────────────────────────────────────

class User(Base):
    """
    Application user.

    username / email are normalised to lower case by the auth service, so
    the plain unique constraints behave case-insensitively.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(32), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    reviews = relationship(
        "Review",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="dynamic",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


class Movie(Base):
    """
    A catalog entry. Rows are seeded outside the API and never edited here.

    imdb_rating is the externally-supplied baseline score; the community
    average is derived from reviews on read and is not a column.
    """
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False, index=True)
    director = Column(String(255), nullable=True)
    year = Column(Integer, nullable=True, index=True)
    genre = Column(String(100), nullable=True, index=True)
    description = Column(Text, nullable=True)
    poster_url = Column(String(500), nullable=True)
    imdb_rating = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    reviews = relationship(
        "Review",
        back_populates="movie",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="dynamic",
    )

    def __repr__(self) -> str:
        return f"<Movie id={self.id} title={self.title!r} year={self.year}>"


class Review(Base):
    """One rating (1-5) plus optional text, per user per movie."""
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    movie_id = Column(
        Integer,
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating = Column(Integer, nullable=False)
    review_text = Column(String(REVIEW_TEXT_MAX_LENGTH), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("movie_id", "user_id", name="uq_reviews_movie_user"),
        CheckConstraint(
            f"rating >= {MIN_RATING} AND rating <= {MAX_RATING}",
            name="chk_review_rating_range",
        ),
    )

    movie = relationship("Movie", back_populates="reviews")
    user = relationship("User", back_populates="reviews")

    def __repr__(self) -> str:
        return f"<Review movie={self.movie_id} user={self.user_id} rating={self.rating}>"
