"""
Movie catalog business logic — filtered listing, detail with community
rating, and the distinct genre/year values used by filter dropdowns.
"""
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.db.models import Movie
from app.services.rating_service import get_rating_summary

logger = logging.getLogger(__name__)

# Query-string sort key -> column. Anything else is ignored.
SORTABLE_COLUMNS = {
    "title": Movie.title,
    "year": Movie.year,
    "imdb_rating": Movie.imdb_rating,
    "created_at": Movie.created_at,
}
SORT_ORDERS = ("ASC", "DESC")


class MovieNotFoundError(Exception):
    """Raised when a movie id does not reference an existing movie."""

    def __init__(self, movie_id: int) -> None:
        self.movie_id = movie_id
        super().__init__(f"Movie {movie_id} not found")


def build_movie_query(
    db: Session,
    search: str | None = None,
    genre: str | None = None,
    year: int | None = None,
    sort_by: str | None = "title",
    order: str | None = "ASC",
):
    """
    Build the catalog listing query.

    Filters are AND-ed. *search* is a case-insensitive substring match on
    title, director or description. An unknown *sort_by* or *order* leaves
    the query unordered instead of failing.
    """
    query = db.query(Movie)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Movie.title.ilike(pattern),
                Movie.director.ilike(pattern),
                Movie.description.ilike(pattern),
            )
        )
    if genre:
        query = query.filter(Movie.genre == genre)
    if year is not None:
        query = query.filter(Movie.year == year)

    column = SORTABLE_COLUMNS.get(sort_by or "")
    direction = (order or "").upper()
    if column is not None and direction in SORT_ORDERS:
        query = query.order_by(column.desc() if direction == "DESC" else column.asc())
    else:
        logger.debug("Ignoring unsupported sort sort_by=%r order=%r", sort_by, order)

    return query


def list_movies(
    db: Session,
    search: str | None = None,
    genre: str | None = None,
    year: int | None = None,
    sort_by: str | None = "title",
    order: str | None = "ASC",
) -> list[Movie]:
    return build_movie_query(db, search, genre, year, sort_by, order).all()


def get_movie(db: Session, movie_id: int) -> Movie | None:
    """Fetch one movie by primary key."""
    return db.query(Movie).filter(Movie.id == movie_id).first()


def get_movie_detail(db: Session, movie_id: int) -> dict:
    """Movie fields plus average_rating/review_count computed from reviews."""
    movie = get_movie(db, movie_id)
    if movie is None:
        raise MovieNotFoundError(movie_id)

    summary = get_rating_summary(db, movie_id)
    return {
        "id": movie.id,
        "title": movie.title,
        "director": movie.director,
        "year": movie.year,
        "genre": movie.genre,
        "description": movie.description,
        "poster_url": movie.poster_url,
        "imdb_rating": movie.imdb_rating,
        "created_at": movie.created_at,
        **summary,
    }


def list_genres(db: Session) -> list[str]:
    rows = (
        db.query(Movie.genre)
        .filter(Movie.genre.isnot(None))
        .distinct()
        .order_by(Movie.genre.asc())
        .all()
    )
    return [row.genre for row in rows]


def list_years(db: Session) -> list[int]:
    rows = (
        db.query(Movie.year)
        .filter(Movie.year.isnot(None))
        .distinct()
        .order_by(Movie.year.desc())
        .all()
    )
    return [row.year for row in rows]
