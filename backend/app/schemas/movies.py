"""
Movie catalog response schemas.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class MovieResponse(BaseModel):
    """One catalog entry."""

    id: int
    title: str
    director: str | None = None
    year: int | None = None
    genre: str | None = None
    description: str | None = None
    poster_url: str | None = None
    imdb_rating: float | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MovieDetailResponse(MovieResponse):
    """Catalog entry plus the community rating, recomputed on every read."""

    average_rating: float = 0.0
    review_count: int = 0


class MovieListResponse(BaseModel):
    movies: list[MovieResponse]


class GenreListResponse(BaseModel):
    genres: list[str]


class YearListResponse(BaseModel):
    years: list[int]
