import json
import logging
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from movies_api.app.main import create_app
from movies_api.tests.fakes import producer_factory

INCEPTION = {"name": "Inception", "year": 2010, "rating": 8.8}


def test_root_reports_running(client) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Server is running"}


def test_create_conflict_scenario(client, auth_headers) -> None:
    first = client.post("/movies", json=INCEPTION, headers=auth_headers)
    assert first.status_code == 200
    movie_id = first.json()["data"]["id"]
    assert isinstance(movie_id, int) and movie_id > 0

    second = client.post("/movies", json=INCEPTION, headers=auth_headers)
    assert second.status_code == 409
    assert second.json() == {"status": 409, "error": "Movie Inception already exists"}

    listing = client.get("/movies", headers=auth_headers).json()["data"]
    assert [m["name"] for m in listing].count("Inception") == 1


def test_create_then_read_round_trip(client, auth_headers) -> None:
    payload = {**INCEPTION, "director": "Christopher Nolan", "genre_ids": [5]}
    created = client.post("/movies", json=payload, headers=auth_headers).json()["data"]

    first = client.get(f"/movies/{created['id']}", headers=auth_headers)
    second = client.get(f"/movies/{created['id']}", headers=auth_headers)
    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json()["data"] == {**payload, "id": created["id"], "actor_ids": []}


def test_lookup_by_name(client, auth_headers) -> None:
    client.post("/movies", json=INCEPTION, headers=auth_headers)
    found = client.get("/movies", params={"name": "Inception"}, headers=auth_headers)
    assert found.status_code == 200
    assert found.json()["data"]["name"] == "Inception"

    missing = client.get("/movies", params={"name": "Alien"}, headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json() == {"status": 404, "error": "Movie with name Alien not found"}


def test_unknown_id_is_stable_not_found(client, auth_headers) -> None:
    for _ in range(2):
        response = client.get("/movies/999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"status": 404, "error": "Movie with ID 999 not found"}


def test_non_numeric_id_is_rejected(client, auth_headers) -> None:
    for method in ("get", "put", "delete"):
        response = client.request(method.upper(), "/movies/abc", headers=auth_headers, json={})
        assert response.status_code == 400
        assert response.json() == {"status": 400, "error": "Invalid movie ID provided"}


def test_validation_precedes_conflict(client, auth_headers) -> None:
    client.post("/movies", json=INCEPTION, headers=auth_headers)
    response = client.post("/movies", json={**INCEPTION, "year": 1800}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "year - Input should be greater than or equal to 1900"


def test_explicit_id_for_fixtures(client, auth_headers) -> None:
    response = client.post("/movies", json={**INCEPTION, "id": 42}, headers=auth_headers)
    assert response.json()["data"]["id"] == 42


def test_partial_update(client, auth_headers) -> None:
    movie_id = client.post("/movies", json=INCEPTION, headers=auth_headers).json()["data"]["id"]
    response = client.put(f"/movies/{movie_id}", json={"rating": 9.3}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"] == {
        **INCEPTION,
        "rating": 9.3,
        "id": movie_id,
        "director": None,
        "genre_ids": [],
        "actor_ids": [],
    }

    missing = client.put("/movies/555", json={"rating": 1.0}, headers=auth_headers)
    assert missing.status_code == 404
    invalid = client.put(f"/movies/{movie_id}", json={"name": ""}, headers=auth_headers)
    assert invalid.status_code == 400


def test_delete_then_delete_again(client, auth_headers) -> None:
    movie_id = client.post("/movies", json=INCEPTION, headers=auth_headers).json()["data"]["id"]

    deleted = client.delete(f"/movies/{movie_id}", headers=auth_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"status": 200, "message": f"Movie {movie_id} has been deleted"}

    again = client.delete(f"/movies/{movie_id}", headers=auth_headers)
    assert again.status_code == 404
    assert again.json() == {"status": 404, "error": f"Movie with ID {movie_id} not found"}


def test_malformed_json_uses_envelope(client, auth_headers) -> None:
    response = client.post(
        "/movies",
        content="{not json",
        headers={**auth_headers, "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["status"] == 400


def test_mutations_publish_events(settings_factory) -> None:
    settings = settings_factory(kafka_enabled=True)
    calls = []
    with TestClient(create_app(settings, producer_factory(calls))) as client:
        headers = {"Authorization": client.get("/auth/fake-token").json()["token"]}
        movie_id = client.post("/movies", json=INCEPTION, headers=headers).json()["data"]["id"]
        client.put(f"/movies/{movie_id}", json={"rating": 9.0}, headers=headers)
        client.delete(f"/movies/{movie_id}", headers=headers)

    topics = [call[1] for call in calls if call[0] == "send"]
    assert sorted(topics) == ["movie-created", "movie-deleted", "movie-updated"]
    events = [json.loads(line) for line in Path(settings.event_log_path).read_text().splitlines()]
    deleted = next(e for e in events if e["topic"] == "movie-deleted")
    assert json.loads(deleted["messages"][0]["value"])["rating"] == 9.0


def test_unreachable_broker_does_not_affect_responses(settings_factory, caplog) -> None:
    settings = settings_factory(kafka_enabled=True)
    calls = []
    with caplog.at_level(logging.WARNING):
        with TestClient(create_app(settings, producer_factory(calls, fail_on_start=True))) as client:
            headers = {"Authorization": client.get("/auth/fake-token").json()["token"]}
            created = client.post("/movies", json=INCEPTION, headers=headers)
            movie_id = created.json()["data"]["id"]
            updated = client.put(f"/movies/{movie_id}", json={"year": 2011}, headers=headers)
            deleted = client.delete(f"/movies/{movie_id}", headers=headers)

    assert created.status_code == 200
    assert updated.status_code == 200
    assert updated.json()["data"]["year"] == 2011
    assert deleted.json() == {"status": 200, "message": f"Movie {movie_id} has been deleted"}
    assert "Kafka broker unavailable, skipping event publication" in caplog.text
    assert not Path(settings.event_log_path).exists()


@pytest.mark.parametrize("literal", ["Infinity", "-Infinity", "NaN"])
def test_non_finite_rating_is_rejected_before_storing(client, auth_headers, literal) -> None:
    headers = {**auth_headers, "Content-Type": "application/json"}
    body = '{"name": "Inf", "year": 2010, "rating": %s}' % literal

    response = client.post("/movies", content=body, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"status": 400, "error": "rating - Input should be a finite number"}

    movie_id = client.post("/movies", json=INCEPTION, headers=auth_headers).json()["data"]["id"]
    update = client.put(f"/movies/{movie_id}", content='{"rating": %s}' % literal, headers=headers)
    assert update.status_code == 400

    listing = client.get("/movies", headers=auth_headers)
    assert listing.status_code == 200
    assert listing.json()["data"] == [
        {**INCEPTION, "id": movie_id, "director": None, "genre_ids": [], "actor_ids": []}
    ]


def test_oversized_id_is_not_found(client, auth_headers) -> None:
    huge = "99999999999999999999"
    expected = {"status": 404, "error": f"Movie with ID {huge} not found"}
    for method in ("GET", "PUT", "DELETE"):
        response = client.request(method, f"/movies/{huge}", headers=auth_headers, json={"rating": 1.0})
        assert response.status_code == 404
        assert response.json() == expected
