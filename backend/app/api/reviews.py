"""
Reviews API — /api/reviews
──────────────────────────
Endpoints:
  POST   /api/reviews                                 — Create or replace own review
  GET    /api/reviews/movie/{movie_id}                — Reviews for a movie (paginated)
  GET    /api/reviews/user/{user_id}                  — Reviews by a user (paginated)
  GET    /api/reviews/user/{user_id}/movie/{movie_id} — One user's review of one movie
  DELETE /api/reviews/{movie_id}                      — Delete own review of a movie
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.api.errors import error
from app.core.config import settings
from app.db.models import User
from app.db.session import get_db
from app.deps.auth import get_current_user
from app.schemas.reviews import (
    ReviewListResponse,
    SingleReviewResponse,
    SubmitReviewRequest,
    SubmitReviewResponse,
)
from app.services.movie_service import MovieNotFoundError
from app.services.review_service import (
    STATUS_CREATED,
    InvalidReviewError,
    ReviewNotFoundError,
    UserNotFoundError,
    delete_review,
    get_user_review,
    list_reviews_by_user,
    list_reviews_for_movie,
    submit_review,
)

router = APIRouter()


def _not_found(code: str, exc: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error(code, str(exc)),
    )


@router.post("", response_model=SubmitReviewResponse, status_code=status.HTTP_201_CREATED)
def post_review(
    payload: SubmitReviewRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Submit a rating (1-5) and optional text. A second submission for the
    same movie replaces the first: 201 when created, 200 when updated.
    """
    try:
        result = submit_review(
            db,
            current_user.id,
            payload.movie_id,
            payload.rating,
            payload.review_text,
        )
    except InvalidReviewError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error("VALIDATION_ERROR", str(exc)),
        ) from exc
    except MovieNotFoundError as exc:
        raise _not_found("MOVIE_NOT_FOUND", exc) from exc

    if result["status"] == STATUS_CREATED:
        message = "Review created successfully"
    else:
        response.status_code = status.HTTP_200_OK
        message = "Review updated successfully"

    return {"message": message, **result}


@router.get("/movie/{movie_id}", response_model=ReviewListResponse)
def get_movie_reviews(
    movie_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return list_reviews_for_movie(db, movie_id, page=page, limit=limit)
    except MovieNotFoundError as exc:
        raise _not_found("MOVIE_NOT_FOUND", exc) from exc


@router.get("/user/{user_id}", response_model=ReviewListResponse)
def get_user_reviews(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return list_reviews_by_user(db, user_id, page=page, limit=limit)
    except UserNotFoundError as exc:
        raise _not_found("USER_NOT_FOUND", exc) from exc


@router.get("/user/{user_id}/movie/{movie_id}", response_model=SingleReviewResponse)
def get_user_movie_review(
    user_id: int,
    movie_id: int,
    db: Session = Depends(get_db),
) -> dict:
    try:
        return {"review": get_user_review(db, user_id, movie_id)}
    except ReviewNotFoundError as exc:
        raise _not_found("REVIEW_NOT_FOUND", exc) from exc


@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_own_review(
    movie_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    try:
        delete_review(db, current_user.id, movie_id)
    except ReviewNotFoundError as exc:
        raise _not_found("REVIEW_NOT_FOUND", exc) from exc
