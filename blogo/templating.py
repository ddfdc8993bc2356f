from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import Request
from fastapi.templating import Jinja2Templates

from blogo.schemas.blog import Post
from blogo.services.seo import page_meta

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(request: Request, name: str, context: Optional[dict] = None, status_code: int = 200):
    """Render a page template with the site settings available as `site` and head metadata as `seo`."""
    container = getattr(request.app.state, "container", None)
    site = container.settings if container is not None else None
    page = {"site": site, "seo": None}
    page.update(context or {})

    if site is not None and page["seo"] is None:
        post = page.get("post")
        page["seo"] = page_meta(
            site.BLOG_TITLE,
            site.BLOG_DESCRIPTION,
            site.public_url,
            quote(request.url.path),
            post if isinstance(post, Post) else None,
        )
    return templates.TemplateResponse(request, name, page, status_code=status_code)
