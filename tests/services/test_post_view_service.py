import pytest

from blogo.db.base import create_session_factory, init_db
from blogo.services.post_view_service import PostViewService
from tests.conftest import FakeSession


def test_get_views_for_slugs_ignores_empty_input():
    session = FakeSession()
    service = PostViewService(session)

    assert service.get_views_for_slugs([]) == {}
    assert service.get_views_for_slugs(["", None]) == {}
    assert session.last_query is None


def test_get_views_for_slugs_maps_rows():
    session = FakeSession(rows=[("a", 3), ("b", 1)])
    service = PostViewService(session)

    assert service.get_views_for_slugs(["a", "b", "a"]) == {"a": 3, "b": 1}
    assert session.last_query.filtered is not None
    assert session.closed is True


def test_get_all_view_counts_maps_rows():
    service = PostViewService(FakeSession(rows=[("a", 2)]))
    assert service.get_all_view_counts() == {"a": 2}


def test_get_view_count_defaults_to_zero():
    class Record:
        view_count = 9

    service = PostViewService(FakeSession(record_map={"known": Record()}))

    assert service.get_view_count("known") == 9
    assert service.get_view_count("unknown") == 0


@pytest.mark.parametrize("dialect", ["sqlite", "postgresql"])
def test_increment_view_upserts_and_commits(dialect):
    session = FakeSession(execute_value=4, dialect=dialect)
    service = PostViewService(session)

    assert service.increment_view("hello") == 4
    assert session.committed is True
    assert session.executed_stmt is not None


def test_increment_view_rejects_unknown_dialect():
    service = PostViewService(FakeSession(dialect="oracle"))

    with pytest.raises(ValueError):
        service.increment_view("hello")


def test_round_trip_against_in_memory_sqlite():
    engine, session_factory = create_session_factory("sqlite://")
    init_db(engine)
    service = PostViewService(session_factory)

    assert service.increment_view("a") == 1
    assert service.increment_view("a") == 2
    assert service.increment_view("b") == 1

    assert service.get_view_count("a") == 2
    assert service.get_all_view_counts() == {"a": 2, "b": 1}
    assert service.get_views_for_slugs(["b", "missing"]) == {"b": 1}
    engine.dispose()
