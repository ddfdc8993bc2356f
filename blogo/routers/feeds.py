from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from blogo.dependencies import get_content_service, get_settings
from blogo.errors import NotFoundError
from blogo.services.content_service import ContentService
from blogo.services.feeds import generate_atom, generate_robots_txt, generate_rss, generate_sitemap
from blogo.settings import Settings

router = APIRouter()


@router.get("/feed.xml")
@router.get("/rss.xml")
async def rss_feed(service: ContentService = Depends(get_content_service), config: Settings = Depends(get_settings)):
    posts = (await service.load_posts()).unwrap()
    body = generate_rss(posts, config.BLOG_TITLE, config.public_url, config.BLOG_DESCRIPTION, config.BLOG_AUTHOR)
    return Response(body, media_type="application/rss+xml")


@router.get("/atom.xml")
async def atom_feed(service: ContentService = Depends(get_content_service), config: Settings = Depends(get_settings)):
    posts = (await service.load_posts()).unwrap()
    body = generate_atom(posts, config.BLOG_TITLE, config.public_url, config.BLOG_DESCRIPTION, config.BLOG_AUTHOR)
    return Response(body, media_type="application/atom+xml")


@router.get("/sitemap.xml")
async def sitemap(service: ContentService = Depends(get_content_service), config: Settings = Depends(get_settings)):
    posts = (await service.load_posts()).unwrap()
    return Response(generate_sitemap(posts, config.public_url), media_type="application/xml")


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots(config: Settings = Depends(get_settings)):
    return generate_robots_txt(config.public_url)


@router.get("/.well-known/site.standard.publication", response_class=PlainTextResponse)
async def publication(config: Settings = Depends(get_settings)):
    if not config.atproto_configured:
        raise NotFoundError("No AT Protocol publication configured")
    return config.publication_uri
