import asyncio

import pytest

from movies_api.app.core.results import Conflict, Internal, Invalid, Message, NotFound, Ok
from movies_api.app.services.movie_service import MovieService
from movies_api.tests.fakes import InMemoryMovieRepository, RecordingNotifier


@pytest.fixture
def repository() -> InMemoryMovieRepository:
    return InMemoryMovieRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(repository, notifier) -> MovieService:
    return MovieService(repository, notifier)


def _inception(**extra) -> dict:
    payload = {"name": "Inception", "year": 2010, "rating": 8.8}
    payload.update(extra)
    return payload


def test_add_movie_creates_and_notifies(service, notifier) -> None:
    result = asyncio.run(service.add_movie(_inception()))
    assert isinstance(result, Ok)
    assert result.status == 200
    assert result.data.id > 0
    assert result.data.name == "Inception"
    assert notifier.events == [("created", result.data)]


def test_add_movie_rejects_duplicate_name(service, repository, notifier) -> None:
    asyncio.run(service.add_movie(_inception()))
    before = len(repository.movies)

    result = asyncio.run(service.add_movie(_inception(rating=5.0)))

    assert isinstance(result, Conflict)
    assert result.status == 409
    assert result.error == "Movie Inception already exists"
    assert len(repository.movies) == before
    assert [action for action, _ in notifier.events] == ["created"]


def test_add_movie_validation_runs_before_store_access(service, repository) -> None:
    result = asyncio.run(service.add_movie({"name": "", "year": 1800, "rating": 7}))
    assert isinstance(result, Invalid)
    assert result.status == 400
    assert "name - String should have at least 1 character" in result.errors
    assert "year - Input should be greater than or equal to 1900" in result.errors
    assert repository.calls == []


def test_add_movie_joins_missing_fields(service) -> None:
    result = asyncio.run(service.add_movie({}))
    assert result.error == "name - Field required, year - Field required, rating - Field required"


def test_add_movie_does_not_coerce_strings(service) -> None:
    result = asyncio.run(service.add_movie(_inception(year="2010")))
    assert isinstance(result, Invalid)
    assert result.errors == ["year - Input should be a valid integer"]


def test_add_movie_rejects_non_object_payload(service) -> None:
    result = asyncio.run(service.add_movie(None))
    assert isinstance(result, Invalid)
    assert result.errors


def test_invalid_payload_wins_over_conflict(service) -> None:
    asyncio.run(service.add_movie(_inception()))
    result = asyncio.run(service.add_movie(_inception(year="2010")))
    assert result.status == 400


def test_add_movie_honours_explicit_id(service) -> None:
    result = asyncio.run(service.add_movie(_inception(), movie_id=42))
    assert result.data.id == 42
    result = asyncio.run(service.add_movie({"id": 7, "name": "Heat", "year": 1995, "rating": 8.3}))
    assert result.data.id == 7


def test_add_movie_surfaces_lookup_failure(service, repository, notifier) -> None:
    repository.failures["get_movie_by_name"] = Internal()
    result = asyncio.run(service.add_movie(_inception()))
    assert isinstance(result, Internal)
    assert "add_movie" not in repository.calls
    assert notifier.events == []


def test_list_movies_with_and_without_name(service) -> None:
    asyncio.run(service.add_movie(_inception()))
    asyncio.run(service.add_movie({"name": "Heat", "year": 1995, "rating": 8.3}))

    everything = asyncio.run(service.list_movies())
    assert [m.name for m in everything.data] == ["Inception", "Heat"]

    one = asyncio.run(service.list_movies("Heat"))
    assert one.data.name == "Heat"

    missing = asyncio.run(service.list_movies("Alien"))
    assert isinstance(missing, NotFound)
    assert missing.error == "Movie with name Alien not found"


def test_get_movie_by_id_is_stable(service) -> None:
    created = asyncio.run(service.add_movie(_inception()))
    first = asyncio.run(service.get_movie_by_id(created.data.id))
    second = asyncio.run(service.get_movie_by_id(created.data.id))
    assert first == second

    missing = asyncio.run(service.get_movie_by_id(999))
    assert missing == NotFound("Movie with ID 999 not found")


def test_update_movie_partially(service, notifier) -> None:
    created = asyncio.run(service.add_movie(_inception()))
    result = asyncio.run(service.update_movie({"rating": 9.1}, created.data.id))
    assert isinstance(result, Ok)
    assert result.data.rating == 9.1
    assert result.data.name == "Inception"
    assert result.data.id == created.data.id
    assert notifier.events[-1] == ("updated", result.data)


def test_update_movie_ignores_id_in_payload(service) -> None:
    created = asyncio.run(service.add_movie(_inception()))
    result = asyncio.run(service.update_movie({"id": 99, "year": 2011}, created.data.id))
    assert result.data.id == created.data.id
    assert result.data.year == 2011


def test_update_missing_movie(service, notifier) -> None:
    result = asyncio.run(service.update_movie({"rating": 1.0}, 5))
    assert result == NotFound("Movie with ID 5 not found")
    assert notifier.events == []


def test_update_invalid_payload_skips_lookup(service, repository) -> None:
    result = asyncio.run(service.update_movie({"year": 3000}, 1))
    assert isinstance(result, Invalid)
    assert repository.calls == []


def test_update_to_taken_name_conflicts(service) -> None:
    asyncio.run(service.add_movie(_inception()))
    heat = asyncio.run(service.add_movie({"name": "Heat", "year": 1995, "rating": 8.3}))
    result = asyncio.run(service.update_movie({"name": "Inception"}, heat.data.id))
    assert result == Conflict("Movie Inception already exists")


def test_delete_movie_then_delete_again(service, notifier) -> None:
    created = asyncio.run(service.add_movie(_inception()))
    movie_id = created.data.id

    result = asyncio.run(service.delete_movie_by_id(movie_id))
    assert result == Message(f"Movie {movie_id} has been deleted")
    assert notifier.events[-1] == ("deleted", created.data)

    again = asyncio.run(service.delete_movie_by_id(movie_id))
    assert again == NotFound(f"Movie with ID {movie_id} not found")


def test_delete_missing_movie_never_calls_delete(service, repository, notifier) -> None:
    result = asyncio.run(service.delete_movie_by_id(404))
    assert isinstance(result, NotFound)
    assert "delete_movie_by_id" not in repository.calls
    assert notifier.events == []


def test_failed_delete_is_not_notified(service, repository, notifier) -> None:
    created = asyncio.run(service.add_movie(_inception()))
    repository.failures["delete_movie_by_id"] = Internal()
    result = asyncio.run(service.delete_movie_by_id(created.data.id))
    assert isinstance(result, Internal)
    assert [action for action, _ in notifier.events] == ["created"]


@pytest.mark.parametrize("rating", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_rating_is_invalid(service, repository, notifier, rating) -> None:
    created = asyncio.run(service.add_movie(_inception(rating=rating)))
    assert isinstance(created, Invalid)
    assert created.error == "rating - Input should be a finite number"
    assert repository.calls == []

    movie = asyncio.run(service.add_movie(_inception())).data
    updated = asyncio.run(service.update_movie({"rating": rating}, movie.id))
    assert isinstance(updated, Invalid)
    assert repository.movies[movie.id].rating == 8.8
    assert [action for action, _ in notifier.events] == ["created"]


def test_identifiers_beyond_storage_range_are_invalid(service, repository) -> None:
    too_big = 2**63
    result = asyncio.run(service.add_movie(_inception(id=too_big, genre_ids=[too_big])))
    assert isinstance(result, Invalid)
    assert any(message.startswith("id - ") for message in result.errors)
    assert any(message.startswith("genre_ids.0 - ") for message in result.errors)
    assert repository.calls == []
