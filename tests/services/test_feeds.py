import datetime
from xml.etree import ElementTree

from blogo.schemas.blog import Post
from blogo.services.feeds import generate_atom, generate_robots_txt, generate_rss, generate_sitemap

BASE = "https://blog.example.com"


def make_post(i, **kwargs):
    fields = dict(
        slug=f"post-{i}",
        title=f"Post {i} & more",
        date=(datetime.date(2024, 1, 1) + datetime.timedelta(days=i)).isoformat(),
        content=f"<p>Body {i}</p>",
    )
    fields.update(kwargs)
    return Post(**fields)


def test_rss_limits_items_and_fills_fields():
    posts = [make_post(i, excerpt="Short", tags=["A", "B"]) for i in range(25, 0, -1)]

    root = ElementTree.fromstring(generate_rss(posts, "Test Blog", BASE + "/").encode())
    items = root.findall("./channel/item")

    assert len(items) == 20
    first = items[0]
    assert first.findtext("title") == "Post 25 & more"
    assert first.findtext("link") == f"{BASE}/posts/post-25"
    assert first.findtext("guid") == f"{BASE}/posts/post-25"
    assert first.findtext("description") == "Short"
    assert [c.text for c in first.findall("category")] == ["A", "B"]
    assert first.findtext("pubDate").startswith("Fri, 26 Jan 2024")
    assert "<p>Body 25</p>" in first.findtext("{http://purl.org/rss/1.0/modules/content/}encoded")


def test_rss_with_no_posts_is_valid():
    root = ElementTree.fromstring(generate_rss([], "Empty", BASE).encode())
    assert root.find("./channel/title").text == "Empty"
    assert root.findall("./channel/item") == []


def test_atom_feed_has_entries():
    ns = {"a": "http://www.w3.org/2005/Atom"}
    xml = generate_atom([make_post(1, modified="2024-03-01")], "Test Blog", BASE)

    root = ElementTree.fromstring(xml.encode())
    entry = root.find("a:entry", ns)
    assert entry.find("a:id", ns).text == f"{BASE}/posts/post-1"
    assert entry.find("a:updated", ns).text.startswith("2024-03-01")


def test_sitemap_lists_pages_posts_and_tags():
    posts = [make_post(1, tags=["Web Dev"]), make_post(2, modified="2024-05-05", tags=["Web Dev", "Go"])]

    xml = generate_sitemap(posts, BASE, today=datetime.date(2024, 6, 1))
    ns = {"s": "http://www.sitemaps.org/schemas/sitemap/0.9"}
    root = ElementTree.fromstring(xml.encode())
    entries = {u.find("s:loc", ns).text: u.find("s:lastmod", ns).text for u in root.findall("s:url", ns)}

    assert entries[f"{BASE}/"] == "2024-06-01"
    assert f"{BASE}/about" in entries
    assert f"{BASE}/tags" in entries
    assert entries[f"{BASE}/posts/post-1"] == "2024-01-02"
    assert entries[f"{BASE}/posts/post-2"] == "2024-05-05"
    assert f"{BASE}/tags/Web%20Dev" in entries
    assert f"{BASE}/tags/Go" in entries
    assert len(entries) == 7


def test_robots_points_at_sitemap():
    robots = generate_robots_txt(BASE + "/")

    assert "User-agent: *" in robots
    assert f"Sitemap: {BASE}/sitemap.xml" in robots
