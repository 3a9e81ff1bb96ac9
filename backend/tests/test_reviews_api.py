import unittest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.db.session import get_db
from app.deps.auth import get_current_user
from app.main import app
from app.services.movie_service import MovieNotFoundError
from app.services.review_service import (
    InvalidReviewError,
    ReviewNotFoundError,
    UserNotFoundError,
)


def _fake_review(**overrides) -> dict:
    now = datetime.now(timezone.utc)
    base = {
        "id": 11,
        "movie_id": 7,
        "user_id": 3,
        "rating": 4,
        "review_text": "Great",
        "created_at": now,
        "updated_at": now,
        "username": None,
        "title": None,
        "poster_url": None,
    }
    base.update(overrides)
    return base


class TestReviewsApi(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)
        app.dependency_overrides[get_db] = lambda: iter([object()])

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def login_as(self, user_id: int) -> None:
        app.dependency_overrides[get_current_user] = lambda: SimpleNamespace(id=user_id)

    def test_submit_requires_auth(self) -> None:
        response = self.client.post("/api/reviews", json={"movieId": 7, "rating": 4})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "UNAUTHORIZED")
        self.assertEqual(response.headers["www-authenticate"], "Bearer")

    def test_submit_with_bad_token_is_unauthorized(self) -> None:
        response = self.client.post(
            "/api/reviews",
            json={"movieId": 7, "rating": 4},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "UNAUTHORIZED")

    def test_submit_created_returns_201(self) -> None:
        self.login_as(3)
        with patch(
            "app.api.reviews.submit_review",
            return_value={"status": "created", "review": _fake_review()},
        ) as submit:
            response = self.client.post(
                "/api/reviews",
                json={"movieId": 7, "rating": 4, "reviewText": "Great"},
            )

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["status"], "created")
        self.assertEqual(payload["message"], "Review created successfully")
        self.assertEqual(payload["review"]["rating"], 4)
        submit.assert_called_once()
        self.assertEqual(submit.call_args.args[1:], (3, 7, 4, "Great"))

    def test_submit_updated_returns_200(self) -> None:
        self.login_as(3)
        with patch(
            "app.api.reviews.submit_review",
            return_value={"status": "updated", "review": _fake_review(rating=2, review_text=None)},
        ):
            response = self.client.post("/api/reviews", json={"movieId": 7, "rating": 2})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "updated")
        self.assertEqual(response.json()["message"], "Review updated successfully")

    def test_submit_rejects_out_of_range_before_service(self) -> None:
        self.login_as(3)
        with patch("app.api.reviews.submit_review") as submit:
            for rating in (0, 6):
                response = self.client.post(
                    "/api/reviews", json={"movieId": 7, "rating": rating}
                )
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")
        submit.assert_not_called()

    def test_submit_rejects_long_text_and_non_integer_movie(self) -> None:
        self.login_as(3)
        long_text = self.client.post(
            "/api/reviews",
            json={"movieId": 7, "rating": 3, "reviewText": "x" * 1001},
        )
        bad_id = self.client.post("/api/reviews", json={"movieId": "abc", "rating": 3})

        self.assertEqual(long_text.status_code, 400)
        self.assertEqual(bad_id.status_code, 400)

    def test_submit_rejects_boolean_rating_and_movie_id(self) -> None:
        self.login_as(3)
        with patch("app.api.reviews.submit_review") as submit:
            for body in ({"movieId": 7, "rating": True}, {"movieId": True, "rating": 3}):
                response = self.client.post("/api/reviews", json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")
        submit.assert_not_called()

    def test_submit_accepts_numeric_string_rating(self) -> None:
        self.login_as(3)
        with patch(
            "app.api.reviews.submit_review",
            return_value={"status": "created", "review": _fake_review()},
        ) as submit:
            response = self.client.post("/api/reviews", json={"movieId": "7", "rating": "4"})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(submit.call_args.args[2:4], (7, 4))

    def test_submit_maps_service_validation_error(self) -> None:
        self.login_as(3)
        with patch(
            "app.api.reviews.submit_review",
            side_effect=InvalidReviewError("Rating must be an integer"),
        ):
            response = self.client.post("/api/reviews", json={"movieId": 7, "rating": 3})

        self.assertEqual(response.status_code, 400)

    def test_submit_maps_missing_movie(self) -> None:
        self.login_as(3)
        with patch("app.api.reviews.submit_review", side_effect=MovieNotFoundError(999)):
            response = self.client.post("/api/reviews", json={"movieId": 999, "rating": 3})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "MOVIE_NOT_FOUND")

    def test_delete_requires_auth(self) -> None:
        response = self.client.delete("/api/reviews/7")
        self.assertEqual(response.status_code, 401)

    def test_delete_204(self) -> None:
        self.login_as(3)
        with patch("app.api.reviews.delete_review", return_value=None) as remove:
            response = self.client.delete("/api/reviews/7")

        self.assertEqual(response.status_code, 204)
        self.assertEqual(remove.call_args.args[1:], (3, 7))

    def test_delete_404_when_missing(self) -> None:
        self.login_as(3)
        with patch(
            "app.api.reviews.delete_review",
            side_effect=ReviewNotFoundError("missing"),
        ):
            response = self.client.delete("/api/reviews/7")

        self.assertEqual(response.status_code, 404)

    def test_movie_reviews_envelope(self) -> None:
        with patch(
            "app.api.reviews.list_reviews_for_movie",
            return_value={
                "reviews": [_fake_review(username="carol")],
                "pagination": {"page": 1, "limit": 10, "total": 1, "pages": 1},
            },
        ) as listing:
            response = self.client.get("/api/reviews/movie/7")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["reviews"][0]["username"], "carol")
        self.assertEqual(payload["pagination"]["total"], 1)
        self.assertEqual(listing.call_args.kwargs, {"page": 1, "limit": 10})

    def test_movie_reviews_pagination_bounds(self) -> None:
        self.assertEqual(self.client.get("/api/reviews/movie/7?page=0").status_code, 400)
        self.assertEqual(self.client.get("/api/reviews/movie/7?limit=101").status_code, 400)

    def test_movie_reviews_404(self) -> None:
        with patch(
            "app.api.reviews.list_reviews_for_movie",
            side_effect=MovieNotFoundError(7),
        ):
            response = self.client.get("/api/reviews/movie/7")
        self.assertEqual(response.status_code, 404)

    def test_user_reviews_envelope(self) -> None:
        with patch(
            "app.api.reviews.list_reviews_by_user",
            return_value={
                "reviews": [_fake_review(title="The Dark Knight", poster_url="https://img/x.jpg")],
                "pagination": {"page": 2, "limit": 5, "total": 6, "pages": 2},
            },
        ) as listing:
            response = self.client.get("/api/reviews/user/3", params={"page": 2, "limit": 5})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["reviews"][0]["title"], "The Dark Knight")
        self.assertEqual(listing.call_args.kwargs, {"page": 2, "limit": 5})

    def test_user_reviews_404(self) -> None:
        with patch(
            "app.api.reviews.list_reviews_by_user",
            side_effect=UserNotFoundError("missing"),
        ):
            response = self.client.get("/api/reviews/user/99")
        self.assertEqual(response.status_code, 404)

    def test_single_user_review(self) -> None:
        with patch(
            "app.api.reviews.get_user_review",
            return_value=_fake_review(username="carol"),
        ):
            response = self.client.get("/api/reviews/user/3/movie/7")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["review"]["username"], "carol")

    def test_single_user_review_404(self) -> None:
        with patch(
            "app.api.reviews.get_user_review",
            side_effect=ReviewNotFoundError("missing"),
        ):
            response = self.client.get("/api/reviews/user/3/movie/7")
        self.assertEqual(response.status_code, 404)
