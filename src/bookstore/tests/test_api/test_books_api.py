"""HTTP-level tests for the /book routes, through the full app (lifespan, middleware, handlers)."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

HUGE_ID = "99999999999999999999999"


def assert_error(resp, status: int, msg: str) -> dict:
    assert resp.status_code == status
    body = resp.json()
    assert body["data"] is None
    assert body["error"]["msg"] == msg
    return body["error"]


class TestCreate:
    def test_post_returns_book_with_first_id(self, post_book):
        resp = post_book()

        assert resp.status_code == 200
        body = resp.json()
        assert body["error"] is None
        assert body["data"] == {
            "id": 1,
            "title": "Fahrenheit 451",
            "author": "Ray Bradbury",
            "year": 1953,
            "description": "A dystopian novel about book burning.",
        }

    def test_post_trailing_slash(self, client: TestClient):
        resp = client.post("/book/", json={"title": "Dune", "author": "Frank Herbert", "year": 1965})
        assert resp.status_code == 200
        assert resp.json()["data"]["id"] == 1

    def test_post_missing_title(self, client: TestClient):
        resp = client.post("/book", json={"author": "Ray Bradbury", "year": 1953})

        error = assert_error(resp, 400, "Invalid request: invalid book payload")
        assert error["code"] == "bad_request"
        assert error["fields"] == [{"field": "Title", "msg": "Title cannot be empty"}]

    def test_post_empty_body(self, client: TestClient):
        resp = client.post("/book", content=b"")
        error = assert_error(resp, 400, "Expected body, found EOF")
        assert error["code"] == "empty_body"
        assert "fields" not in error

    def test_post_malformed_json(self, client: TestClient):
        resp = client.post("/book", content=b"{not json", headers={"Content-Type": "application/json"})
        assert_error(resp, 400, "Invalid request: malformed JSON body")

    def test_post_json_array(self, client: TestClient):
        resp = client.post("/book", json=[{"title": "Dune"}])
        assert_error(resp, 400, "Invalid request: expected a JSON object")

    def test_post_wrong_year_type(self, client: TestClient):
        resp = client.post("/book", json={"title": "Dune", "author": "Frank Herbert", "year": "abc"})

        error = assert_error(resp, 400, "Invalid request: invalid book payload")
        assert error["fields"] == [{"field": "Year", "msg": "Year should be an integer"}]

    @pytest.mark.parametrize("year", [True, "1965", 1965.0])
    def test_post_year_is_not_coerced(self, client: TestClient, year):
        resp = client.post("/book", json={"title": "Dune", "author": "Frank Herbert", "year": year})

        error = assert_error(resp, 400, "Invalid request: invalid book payload")
        assert error["fields"] == [{"field": "Year", "msg": "Year should be an integer"}]
        assert_error(client.get("/book"), 404, "Book(s) not found in db")

    def test_post_title_is_not_coerced(self, client: TestClient):
        resp = client.post("/book", json={"title": 451, "author": "Ray Bradbury", "year": 1953})

        error = assert_error(resp, 400, "Invalid request: invalid book payload")
        assert error["fields"] == [{"field": "Title", "msg": "Title should be a string"}]

    def test_post_year_before_lower_bound(self, post_book):
        resp = post_book(year=-1000)
        assert resp.status_code == 400
        assert resp.json()["error"]["fields"][0]["msg"].startswith("Year should be between -868 and ")


class TestRead:
    def test_get_by_id(self, client: TestClient, post_book):
        post_book()
        resp = client.get("/book/1")

        assert resp.status_code == 200
        assert resp.json()["data"]["title"] == "Fahrenheit 451"

    def test_get_zero_is_invalid_serial(self, client: TestClient):
        error = assert_error(client.get("/book/0"), 400, "Invalid serial. Serial must be more than 1")
        assert error["code"] == "invalid_serial"

    def test_get_non_integer_id(self, client: TestClient):
        assert_error(client.get("/book/abc"), 400, "Invalid serial. Serial must be more than 1")

    def test_get_missing_book(self, client: TestClient, post_book):
        post_book()
        assert_error(client.get("/book/999"), 404, "Book(s) not found in db")

    def test_get_id_beyond_column_range(self, client: TestClient, post_book):
        post_book()
        assert_error(client.get(f"/book/{HUGE_ID}"), 404, "Book(s) not found in db")

    @pytest.mark.parametrize("path, field", [("/book/author/", "Author"), ("/book/title/", "Title")])
    def test_search_with_empty_term(self, client: TestClient, path, field):
        error = assert_error(client.get(path), 400, "Invalid request: invalid book payload")
        assert error["fields"] == [{"field": field, "msg": f"{field} cannot be empty"}]

    def test_list_books(self, client: TestClient, post_book):
        post_book(title="Dune", author="Frank Herbert", year=1965)
        post_book()

        for path in ("/book", "/book/"):
            resp = client.get(path)
            assert resp.status_code == 200
            assert [b["id"] for b in resp.json()["data"]] == [1, 2]

    def test_list_empty_store(self, client: TestClient):
        assert_error(client.get("/book"), 404, "Book(s) not found in db")

    def test_search_by_author(self, client: TestClient, post_book):
        post_book(title="Dune", author="Frank Herbert", year=1965)
        post_book(title="Dune Messiah", author="Frank Herbert", year=1969)
        post_book()

        resp = client.get("/book/author/Frank Herbert")
        assert resp.status_code == 200
        assert [b["title"] for b in resp.json()["data"]] == ["Dune", "Dune Messiah"]

    def test_search_by_author_not_found(self, client: TestClient):
        assert_error(client.get("/book/author/Nobody"), 404, "Book(s) with author Nobody not found in db")

    def test_search_by_title(self, client: TestClient, post_book):
        post_book()
        resp = client.get("/book/title/Fahrenheit 451")

        assert resp.status_code == 200
        assert resp.json()["data"]["id"] == 1

    def test_search_by_title_not_found(self, client: TestClient):
        assert_error(client.get("/book/title/Ubik"), 404, "Book(s) with title Ubik not found in db")


class TestUpdate:
    def test_put_replaces_book(self, client: TestClient, post_book):
        post_book()
        resp = client.put(
            "/book/1",
            json={"title": "The Martian Chronicles", "author": "Ray Bradbury", "year": 1950, "description": None},
        )

        assert resp.status_code == 200
        assert resp.json()["data"] == {
            "id": 1,
            "title": "The Martian Chronicles",
            "author": "Ray Bradbury",
            "year": 1950,
            "description": None,
        }
        assert client.get("/book/1").json()["data"]["title"] == "The Martian Chronicles"

    def test_put_missing_book(self, client: TestClient):
        resp = client.put("/book/5", json={"title": "X", "author": "Y", "year": 2000})
        assert_error(resp, 404, "Book(s) not found in db")

    def test_put_id_beyond_column_range(self, client: TestClient):
        resp = client.put(f"/book/{HUGE_ID}", json={"title": "X", "author": "Y", "year": 1})
        assert_error(resp, 404, "Book(s) not found in db")

    def test_put_invalid_serial(self, client: TestClient):
        resp = client.put("/book/-3", json={"title": "X", "author": "Y", "year": 2000})
        assert_error(resp, 400, "Invalid serial. Serial must be more than 1")

    def test_put_empty_body(self, client: TestClient, post_book):
        post_book()
        assert_error(client.put("/book/1", content=b""), 400, "Expected body, found EOF")


class TestDelete:
    def test_delete_book_returns_rows_affected(self, client: TestClient, post_book):
        post_book()
        resp = client.delete("/book/1")

        assert resp.status_code == 200
        assert resp.json() == {"data": 1, "error": None}
        assert_error(client.get("/book/1"), 404, "Book(s) not found in db")

    def test_delete_missing_book(self, client: TestClient):
        assert_error(client.delete("/book/1"), 404, "Book(s) not found in db")

    def test_delete_id_beyond_column_range(self, client: TestClient):
        assert_error(client.delete(f"/book/{HUGE_ID}"), 404, "Book(s) not found in db")

    def test_delete_all_then_again(self, client: TestClient, post_book):
        post_book()
        post_book(title="Dune", author="Frank Herbert", year=1965)

        resp = client.delete("/book")
        assert resp.status_code == 200
        assert resp.json()["data"] == 2

        assert_error(client.delete("/book/"), 404, "Book(s) not found in db")

    def test_ids_restart_after_delete_all(self, client: TestClient, post_book):
        post_book()
        post_book()
        client.delete("/book")

        assert post_book().json()["data"]["id"] == 1


async def failing_commit(self):
    raise OperationalError("COMMIT", {}, Exception("disk I/O error"))


class TestCommit:
    def test_failed_commit_is_reported_not_saved(self, client: TestClient, post_book, monkeypatch):
        monkeypatch.setattr(AsyncSession, "commit", failing_commit)

        error = assert_error(post_book(), 500, "Could not execute query: save_book")
        assert error["code"] == "could_not_query"
        assert_error(client.get("/book"), 404, "Book(s) not found in db")

    def test_failed_commit_keeps_deleted_rows(self, client: TestClient, post_book, monkeypatch):
        post_book()
        monkeypatch.setattr(AsyncSession, "commit", failing_commit)

        error = assert_error(client.delete("/book/1"), 500, "Could not execute query: delete_book")
        assert error["code"] == "could_not_query"
        assert client.get("/book/1").json()["data"]["title"] == "Fahrenheit 451"


class TestEnvelope:
    def test_request_id_header_is_echoed(self, client: TestClient):
        resp = client.get("/book/0", headers={"X-Request-ID": "req-42"})
        assert resp.headers["X-Request-ID"] == "req-42"

    def test_request_id_generated_when_missing(self, client: TestClient):
        resp = client.get("/book/0")
        assert resp.headers.get("X-Request-ID")

    def test_cors_allows_any_origin(self, client: TestClient):
        resp = client.get("/book/0", headers={"Origin": "http://example.com"})
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_unknown_route_keeps_envelope(self, client: TestClient):
        resp = client.get("/nope")
        assert resp.status_code == 404
        assert resp.json()["data"] is None

    def test_health(self, client: TestClient):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
