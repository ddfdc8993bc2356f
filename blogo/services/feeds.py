import datetime
import logging
from typing import Optional, Sequence
from urllib.parse import quote
from xml.etree import ElementTree

from feedgen.feed import FeedGenerator

from blogo.schemas.blog import Post

logger = logging.getLogger(__name__)

FEED_LIMIT = 20
SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def _as_datetime(iso_date: str) -> datetime.datetime:
    day = datetime.date.fromisoformat(iso_date)
    return datetime.datetime.combine(day, datetime.time.min, tzinfo=datetime.timezone.utc)


def _build_feed(
    posts: Sequence[Post],
    title: str,
    description: str,
    base_url: str,
    self_path: str,
    self_type: str,
    author: Optional[str] = None,
) -> FeedGenerator:
    base_url = base_url.rstrip("/")
    fg = FeedGenerator()
    fg.id(base_url + "/")
    fg.title(title)
    fg.subtitle(description or f"Articles from {title}")
    fg.link(href=base_url + "/", rel="alternate")
    fg.link(href=f"{base_url}{self_path}", rel="self", type=self_type)
    fg.language("en-us")
    fg.generator("blogo")
    if author:
        fg.author(name=author)

    recent = list(posts)[:FEED_LIMIT]
    fg.updated(_as_datetime(recent[0].modified or recent[0].date) if recent else datetime.datetime.now(datetime.timezone.utc))

    for post in recent:
        url = f"{base_url}/posts/{post.slug}"
        fe = fg.add_entry(order="append")
        fe.id(url)
        fe.guid(url, permalink=True)
        fe.title(post.title)
        fe.link(href=url)
        fe.published(_as_datetime(post.date))
        fe.updated(_as_datetime(post.modified or post.date))
        if post.excerpt:
            fe.description(post.excerpt)
        for tag in post.tags:
            fe.category(term=tag)
        fe.content(post.content, type="CDATA")
    return fg


def generate_rss(
    posts: Sequence[Post], title: str, base_url: str, description: str = "", author: Optional[str] = None
) -> str:
    """RSS 2.0 feed of the 20 most recent posts; `posts` must already be date-descending."""
    fg = _build_feed(posts, title, description, base_url, "/feed.xml", "application/rss+xml", author)
    return fg.rss_str(pretty=True).decode("utf-8")


def generate_atom(
    posts: Sequence[Post], title: str, base_url: str, description: str = "", author: Optional[str] = None
) -> str:
    fg = _build_feed(posts, title, description, base_url, "/atom.xml", "application/atom+xml", author)
    return fg.atom_str(pretty=True).decode("utf-8")


def _change_freq(path: str) -> str:
    if path == "/":
        return "daily"
    if path.startswith("/tags/"):
        return "weekly"
    return "monthly"


def generate_sitemap(posts: Sequence[Post], base_url: str, today: Optional[datetime.date] = None) -> str:
    base_url = base_url.rstrip("/")
    today_iso = (today or datetime.date.today()).isoformat()

    pages = [("/", today_iso, "1.0"), ("/about", today_iso, "0.8"), ("/tags", today_iso, "0.7")]
    pages += [(f"/posts/{post.slug}", post.modified or post.date, "0.9") for post in posts]

    seen_tags = []
    for post in posts:
        for tag in post.tags:
            if tag not in seen_tags:
                seen_tags.append(tag)
    pages += [(f"/tags/{quote(tag, safe='')}", today_iso, "0.6") for tag in seen_tags]

    urlset = ElementTree.Element("urlset", xmlns=SITEMAP_NS)
    for path, lastmod, priority in pages:
        url = ElementTree.SubElement(urlset, "url")
        ElementTree.SubElement(url, "loc").text = f"{base_url}{path}"
        ElementTree.SubElement(url, "lastmod").text = lastmod
        ElementTree.SubElement(url, "changefreq").text = _change_freq(path)
        ElementTree.SubElement(url, "priority").text = priority

    ElementTree.indent(urlset)
    body = ElementTree.tostring(urlset, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


def generate_robots_txt(base_url: str) -> str:
    return (
        "User-agent: *\n"
        "Allow: /\n"
        "\n"
        f"Sitemap: {base_url.rstrip('/')}/sitemap.xml\n"
        "\n"
        "Crawl-delay: 1\n"
        "\n"
        "Disallow: /dev/\n"
        "Disallow: /test/\n"
        "Disallow: /_/\n"
    )
