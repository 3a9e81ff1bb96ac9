"""
End-to-end review flow through the HTTP layer against in-memory SQLite.
"""
import unittest
from types import SimpleNamespace
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base, Movie, Review, User
from app.db.session import configure_sqlite_engine, get_db
from app.deps.auth import get_current_user
from app.main import app


class TestReviewFlow(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = configure_sqlite_engine(
            create_engine(
                "sqlite://",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        )
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

        with self.Session() as db:
            db.add_all([
                User(id=3, username="carol", email="carol@example.com", password_hash="x"),
                Movie(id=7, title="The Dark Knight", year=2008, genre="Action", imdb_rating=9.0),
                Movie(id=8, title="Pulp Fiction", year=1994, genre="Crime", imdb_rating=8.9),
            ])
            db.commit()

        def override_get_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_current_user] = lambda: SimpleNamespace(id=3)
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.engine.dispose()

    def review_count(self) -> int:
        with self.Session() as db:
            return db.query(func.count(Review.id)).scalar()

    def test_create_then_update_scenario(self) -> None:
        created = self.client.post(
            "/api/reviews",
            json={"movieId": 7, "rating": 4, "reviewText": "Great"},
        )
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["status"], "created")

        movie = self.client.get("/api/movies/7").json()
        self.assertEqual(movie["review_count"], 1)
        self.assertEqual(movie["average_rating"], 4.0)

        updated = self.client.post("/api/reviews", json={"movieId": 7, "rating": 2})
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["status"], "updated")
        self.assertEqual(updated.json()["review"]["id"], created.json()["review"]["id"])

        movie = self.client.get("/api/movies/7").json()
        self.assertEqual(movie["review_count"], 1)
        self.assertEqual(movie["average_rating"], 2.0)

        mine = self.client.get("/api/reviews/user/3/movie/7").json()["review"]
        self.assertEqual(mine["rating"], 2)
        self.assertEqual(mine["username"], "carol")

    def test_invalid_rating_writes_nothing(self) -> None:
        for rating in (0, 6):
            response = self.client.post("/api/reviews", json={"movieId": 7, "rating": rating})
            self.assertEqual(response.status_code, 400)
        self.assertEqual(self.review_count(), 0)

    def test_review_for_missing_movie(self) -> None:
        response = self.client.post("/api/reviews", json={"movieId": 999, "rating": 3})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.review_count(), 0)

    def test_delete_flow(self) -> None:
        self.client.post("/api/reviews", json={"movieId": 7, "rating": 5})

        self.assertEqual(self.client.delete("/api/reviews/7").status_code, 204)
        self.assertEqual(self.client.delete("/api/reviews/7").status_code, 404)

        movie = self.client.get("/api/movies/7").json()
        self.assertEqual(movie["review_count"], 0)
        self.assertEqual(movie["average_rating"], 0)

    def test_listing_after_reviews(self) -> None:
        self.client.post("/api/reviews", json={"movieId": 7, "rating": 5})
        self.client.post("/api/reviews", json={"movieId": 8, "rating": 3})

        by_user = self.client.get("/api/reviews/user/3", params={"limit": 1}).json()
        self.assertEqual(by_user["pagination"], {"page": 1, "limit": 1, "total": 2, "pages": 2})
        self.assertEqual(by_user["reviews"][0]["title"], "Pulp Fiction")

        by_movie = self.client.get("/api/reviews/movie/7").json()
        self.assertEqual(by_movie["reviews"][0]["username"], "carol")

    def test_unknown_sort_key_lists_everything(self) -> None:
        response = self.client.get("/api/movies", params={"sortBy": "unknownfield"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["movies"]), 2)

    def test_store_failure_is_opaque_500(self) -> None:
        failure = OperationalError("SELECT 1", {}, Exception("disk I/O error"))
        with patch("app.api.movies.list_movies", side_effect=failure):
            response = self.client.get("/api/movies")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {"error": {"code": "INTERNAL_ERROR", "message": "Server error"}},
        )
