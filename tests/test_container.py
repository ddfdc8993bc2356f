import pytest

from blogo.container import create_container
from blogo.services.post_view_service import PostViewService
from tests.conftest import FakeViewService


def test_create_container_wires_shared_caches(test_settings):
    views = FakeViewService()

    container = create_container(test_settings, view_service=views)

    assert container.engine is None
    assert container.view_service is views
    assert container.content_service.view_counts is views
    assert container.content_service.posts_cache is container.caches["posts"]
    assert container.content_service.metadata_cache is container.caches["metadata"]
    assert container.content_service.post_cache is container.caches["post"]
    assert container.health_service.watched_caches is container.caches
    assert container.health_service.metrics is container.metrics
    assert container.view_guard is not container.caches["posts"]


def test_create_container_builds_sqlalchemy_view_service(test_settings):
    container = create_container(test_settings)
    try:
        assert isinstance(container.view_service, PostViewService)
        assert container.view_service.increment_view("hello") == 1
        assert container.view_service.get_view_count("hello") == 1
    finally:
        container.dispose()


@pytest.mark.asyncio
async def test_container_views_flow_through_content_service(test_settings, write_post):
    write_post("hello.md", title="Hello")
    container = create_container(test_settings)
    try:
        assert (await container.content_service.increment_view("hello")).value == 1
        metadata = (await container.content_service.load_posts_metadata_with_views()).value
        assert metadata[0].viewCount == 1
    finally:
        container.dispose()
