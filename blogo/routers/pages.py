import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from blogo.dependencies import get_content_service, get_settings
from blogo.errors import NotFoundError
from blogo.services.content_service import ContentService
from blogo.services.topics import derive_topics_from_tags, group_tags_by_topic, slug_to_topic, topic_to_slug
from blogo.settings import Settings
from blogo.templating import render
from blogo.utils import paginate

logger = logging.getLogger(__name__)

router = APIRouter(default_response_class=HTMLResponse)


@router.get("/")
async def home(
    request: Request,
    page: int = 1,
    service: ContentService = Depends(get_content_service),
    config: Settings = Depends(get_settings),
):
    posts = (await service.load_posts()).unwrap()
    items, total_pages = paginate(posts, page, config.POSTS_PER_PAGE)
    current = min(max(page, 1), total_pages)
    return render(
        request,
        "index.html",
        {"posts": items, "page": current, "total_pages": total_pages},
    )


@router.get("/about")
async def about(request: Request):
    return render(request, "about.html")


@router.get("/tags")
async def tags_index(request: Request, service: ContentService = Depends(get_content_service)):
    tags = (await service.get_all_tags()).unwrap()
    return render(request, "tags.html", {"tags": tags, "groups": group_tags_by_topic(tags)})


@router.get("/tags/{tag}")
async def tag_posts(tag: str, request: Request, service: ContentService = Depends(get_content_service)):
    posts = (await service.get_posts_by_tag(tag)).unwrap()
    if not posts:
        raise NotFoundError(f"No posts tagged {tag}")
    return render(request, "tag.html", {"tag": tag, "posts": posts})


@router.get("/topics/{topic_slug}")
async def topic_posts(topic_slug: str, request: Request, service: ContentService = Depends(get_content_service)):
    topic = slug_to_topic(topic_slug)
    if topic is None:
        raise NotFoundError(f"Unknown topic: {topic_slug}")

    tags = (await service.get_all_tags()).unwrap()
    group = next((g for g in group_tags_by_topic(tags) if g.topic == topic), None)
    tag_names = {t.name for t in group.tags} if group else set()
    posts = (await service.load_posts()).unwrap()
    return render(
        request,
        "topic.html",
        {
            "topic": topic,
            "tags": group.tags if group else [],
            "posts": [p for p in posts if tag_names.intersection(p.tags)],
        },
    )


@router.get("/posts/{slug}")
async def post_detail(slug: str, request: Request, service: ContentService = Depends(get_content_service)):
    post = (await service.get_post_by_slug(slug)).unwrap()
    views = await service.get_view_count(slug)
    topics = [{"name": t, "slug": topic_to_slug(t)} for t in derive_topics_from_tags(post.tags)]
    return render(request, "post.html", {"post": post, "views": views, "topics": topics})


@router.get("/search")
async def search(request: Request, q: str = "", service: ContentService = Depends(get_content_service)):
    results = (await service.search_posts(q)).unwrap()
    return render(request, "search.html", {"query": q, "posts": results})
