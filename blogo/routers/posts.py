import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from blogo.container import Container
from blogo.dependencies import get_container, get_content_service
from blogo.schemas.blog import Post, PostMeta, TagSummary
from blogo.services.content_service import ContentService

logger = logging.getLogger(__name__)

router = APIRouter()
VIEW_GUARD_TTL_SECONDS = 30
VIEW_GUARD_PRUNE_THRESHOLD = 512


@router.get("/api/posts", response_model=List[PostMeta])
async def list_posts(service: ContentService = Depends(get_content_service)):
    """Get all posts metadata with view counts."""
    return (await service.load_posts_metadata_with_views()).unwrap()


@router.get("/api/posts/{slug}", response_model=Post)
async def get_post(slug: str, service: ContentService = Depends(get_content_service)):
    """Get a single rendered post by slug."""
    post = (await service.get_post_by_slug(slug)).unwrap()
    views = await service.get_view_count(slug)
    return post.model_copy(update={"viewCount": views})


@router.get("/api/tags", response_model=List[TagSummary])
async def list_tags(service: ContentService = Depends(get_content_service)):
    tags = (await service.get_all_tags()).unwrap()
    return [TagSummary(name=t.name, count=t.count) for t in tags]


@router.post("/views/{slug}")
async def increment_post_views(
    slug: str,
    request: Request,
    container: Container = Depends(get_container),
):
    service = container.content_service
    client_ip = request.client.host if request.client else ""
    if client_ip and _should_skip_increment(container, client_ip, slug):
        (await service.get_post_by_slug(slug)).unwrap()
        return {"views": await service.get_view_count(slug)}

    views = (await service.increment_view(slug)).unwrap()
    return {"views": views}


def _should_skip_increment(container: Container, client_ip: str, slug: str) -> bool:
    key = f"{client_ip}:{slug}"
    if container.view_guard.get(key) is not None:
        return True
    container.view_guard.set(key, True, VIEW_GUARD_TTL_SECONDS)
    if len(container.view_guard) > VIEW_GUARD_PRUNE_THRESHOLD:
        container.view_guard.purge_expired()
    return False
