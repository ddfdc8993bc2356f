import json
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from blogo.schemas.blog import Post
from blogo.utils import strip_html

DESCRIPTION_FALLBACK_LENGTH = 200


class PageMeta(BaseModel):
    """Head metadata for one rendered page."""

    title: str
    description: str
    canonical_url: str
    og_type: str = "website"
    open_graph: List[Tuple[str, str]] = Field(default_factory=list)
    twitter: List[Tuple[str, str]] = Field(default_factory=list)
    json_ld: str


def _iso_timestamp(iso_date: str) -> str:
    return f"{iso_date}T00:00:00.000Z"


def to_json_ld(schema: dict) -> str:
    # keeps the payload from closing the surrounding <script> element
    return json.dumps(schema, ensure_ascii=False).replace("</", "<\\/")


def website_schema(title: str, url: str, description: str) -> dict:
    return {
        "@context": "https://schema.org",
        "@type": "WebSite",
        "name": title,
        "url": url,
        "description": description,
        "potentialAction": {
            "@type": "SearchAction",
            "target": f"{url}/search?q={{search_term_string}}",
            "query-input": "required name=search_term_string",
        },
    }


def post_description(post: Post) -> str:
    if post.excerpt:
        return post.excerpt
    text = " ".join(strip_html(post.content).split())
    return text[:DESCRIPTION_FALLBACK_LENGTH] + "..."


def blog_post_schema(post: Post, base_url: str) -> dict:
    post_url = f"{base_url}/posts/{post.slug}"
    return {
        "@context": "https://schema.org",
        "@type": "BlogPosting",
        "mainEntityOfPage": {"@type": "WebPage", "@id": post_url},
        "headline": post.title,
        "description": post_description(post),
        "datePublished": _iso_timestamp(post.date),
        "dateModified": _iso_timestamp(post.modified or post.date),
        "keywords": ", ".join(post.tags),
        "url": post_url,
    }


def page_meta(
    blog_title: str,
    blog_description: str,
    base_url: str,
    path: str,
    post: Optional[Post] = None,
) -> PageMeta:
    """
    Canonical URL, OpenGraph/Twitter tags and JSON-LD for a page.
    Post pages describe the post as a BlogPosting; every other page describes the site.
    """
    base_url = base_url.rstrip("/")
    canonical_url = f"{base_url}{path}"

    if post is not None:
        title = f"{post.title} | {blog_title}"
        description = post_description(post)
        og_type = "article"
        schema = blog_post_schema(post, base_url)
    else:
        title = blog_title
        description = blog_description
        og_type = "website"
        schema = website_schema(blog_title, base_url, blog_description)

    open_graph = [
        ("og:title", title),
        ("og:description", description),
        ("og:url", canonical_url),
        ("og:type", og_type),
        ("og:site_name", blog_title),
    ]
    if post is not None:
        open_graph.append(("article:published_time", _iso_timestamp(post.date)))
        open_graph.extend(("article:tag", tag) for tag in post.tags)

    return PageMeta(
        title=title,
        description=description,
        canonical_url=canonical_url,
        og_type=og_type,
        open_graph=open_graph,
        twitter=[("twitter:card", "summary"), ("twitter:title", title), ("twitter:description", description)],
        json_ld=to_json_ld(schema),
    )
