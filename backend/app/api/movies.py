"""
Movies API — /api/movies
────────────────────────
Endpoints:
  GET /api/movies               — Search / filter / sort the catalog
  GET /api/movies/genres/list   — Distinct genres (filter dropdown)
  GET /api/movies/years/list    — Distinct years, newest first
  GET /api/movies/{movie_id}    — Detail + average_rating / review_count
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.errors import error
from app.db.session import get_db
from app.schemas.movies import (
    GenreListResponse,
    MovieDetailResponse,
    MovieListResponse,
    MovieResponse,
    YearListResponse,
)
from app.services.movie_service import (
    MovieNotFoundError,
    get_movie_detail,
    list_genres,
    list_movies,
    list_years,
)

router = APIRouter()


@router.get("", response_model=MovieListResponse)
def get_movies(
    search: str | None = Query(None, description="Substring of title, director or description"),
    genre: str | None = Query(None),
    year: int | None = Query(None),
    sort_by: str | None = Query("title", alias="sortBy"),
    order: str | None = Query("ASC"),
    db: Session = Depends(get_db),
) -> dict:
    """
    List movies. Unsupported sortBy/order values are ignored rather than
    rejected, leaving the result unordered.
    """
    movies = list_movies(
        db,
        search=search,
        genre=genre,
        year=year,
        sort_by=sort_by,
        order=order,
    )
    return {"movies": [MovieResponse.model_validate(movie) for movie in movies]}


@router.get("/genres/list", response_model=GenreListResponse)
def get_genres(db: Session = Depends(get_db)) -> dict:
    return {"genres": list_genres(db)}


@router.get("/years/list", response_model=YearListResponse)
def get_years(db: Session = Depends(get_db)) -> dict:
    return {"years": list_years(db)}


@router.get("/{movie_id}", response_model=MovieDetailResponse)
def get_movie_by_id(movie_id: int, db: Session = Depends(get_db)) -> dict:
    try:
        return get_movie_detail(db, movie_id)
    except MovieNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error("MOVIE_NOT_FOUND", str(exc)),
        ) from exc
