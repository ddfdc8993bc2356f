import logging
from dataclasses import dataclass, field
from typing import Optional

from blogo.db.base import create_session_factory, init_db
from blogo.repos.posts_repo import FilePostsRepo
from blogo.services.cache import TTLCache
from blogo.services.content_service import ContentService
from blogo.services.health_service import HealthService, RequestMetrics
from blogo.services.markdown_renderer import MarkdownRenderer
from blogo.services.post_view_service import PostViewService
from blogo.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Everything the app, the builder and the scripts share for one process."""

    settings: Settings
    repo: FilePostsRepo
    content_service: ContentService
    health_service: HealthService
    metrics: RequestMetrics
    view_guard: TTLCache
    view_service: Optional[PostViewService] = None
    engine: Optional[object] = None
    caches: dict = field(default_factory=dict)

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("View-count database connections closed")


def create_container(config: Optional[Settings] = None, view_service=None) -> Container:
    """
    Wire caches, repository and services from settings. A view service passed
    in replaces the SQLAlchemy-backed one (no engine is created then).
    """
    config = config or default_settings

    engine = None
    if view_service is None:
        engine, session_factory = create_session_factory(config.VIEWS_DATABASE_URL)
        init_db(engine)
        view_service = PostViewService(session_factory)

    caches = {
        "posts": TTLCache(name="posts"),
        "metadata": TTLCache(name="metadata"),
        "post": TTLCache(name="post"),
    }
    repo = FilePostsRepo(config.POSTS_DIR)
    content_service = ContentService(
        repo=repo,
        renderer=MarkdownRenderer(),
        posts_cache=caches["posts"],
        metadata_cache=caches["metadata"],
        post_cache=caches["post"],
        view_counts=view_service,
        cache_ttl=config.CACHE_TTL_SECONDS,
    )

    metrics = RequestMetrics()
    health_service = HealthService(
        posts_dir=config.POSTS_DIR,
        cache=TTLCache(name="health"),
        metrics=metrics,
        watched_caches=caches,
    )

    return Container(
        settings=config,
        repo=repo,
        content_service=content_service,
        health_service=health_service,
        metrics=metrics,
        view_guard=TTLCache(name="view-guard"),
        view_service=view_service,
        engine=engine,
        caches=caches,
    )
