import datetime
import re
from typing import Optional, Tuple

import frontmatter

from blogo.errors import ValidationError
from blogo.schemas.atproto import MARKDOWN_CONTENT, DocumentContent, StandardDocument
from blogo.schemas.blog import PostMeta
from blogo.utils import slugify

TEXT_CONTENT_LIMIT = 10000

_RKEY_INVALID = re.compile(r"[^a-zA-Z0-9-]")

# Applied in order; fenced blocks go first so their backticks don't read as inline code.
_MARKDOWN_PATTERNS = [
    (re.compile(r"```[\s\S]*?```"), ""),
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),
    (re.compile(r"\*\*(.+?)\*\*"), r"\1"),
    (re.compile(r"\*(.+?)\*"), r"\1"),
    (re.compile(r"`(.+?)`"), r"\1"),
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"^>\s+", re.MULTILINE), ""),
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"\n{2,}"), "\n"),
]


def slug_to_rkey(slug: str) -> str:
    return _RKEY_INVALID.sub("", slug)


def strip_markdown(markdown: str) -> str:
    text = markdown
    for pattern, replacement in _MARKDOWN_PATTERNS:
        text = pattern.sub(replacement, text)
    return text.strip()


def _to_timestamp(iso_date: str) -> str:
    return f"{iso_date}T00:00:00.000Z"


def _to_date(timestamp: str) -> datetime.date:
    return datetime.date.fromisoformat(timestamp.split("T", 1)[0])


def post_to_document(post: PostMeta, raw_markdown: str, publication_uri: str, public_url: str) -> StandardDocument:
    return StandardDocument(
        site=publication_uri,
        title=post.title,
        publishedAt=_to_timestamp(post.date),
        path=f"/posts/{post.slug}",
        description=post.excerpt or None,
        content=DocumentContent(type=MARKDOWN_CONTENT, value=raw_markdown),
        textContent=strip_markdown(raw_markdown)[:TEXT_CONTENT_LIMIT],
        tags=list(post.tags) or None,
        updatedAt=_to_timestamp(post.modified) if post.modified else None,
    )


def _document_body(content: Optional[DocumentContent]) -> str:
    # markdown and html bodies are both written verbatim
    return (content.value or "") if content is not None else ""


def document_to_markdown(doc: StandardDocument) -> Tuple[str, str]:
    """Return (filename, file content) for a pulled document."""
    slug = slugify(doc.path.removeprefix("/posts/"))
    if not slug:
        raise ValidationError(f"Document path {doc.path!r} has no usable slug", errors=["path: no usable slug"])

    metadata = {"title": doc.title, "date": _to_date(doc.publishedAt)}
    if doc.tags:
        metadata["tags"] = list(doc.tags)
    if doc.description:
        metadata["excerpt"] = doc.description
    if doc.updatedAt:
        metadata["modified"] = _to_date(doc.updatedAt)

    post = frontmatter.Post(_document_body(doc.content).strip(), **metadata)
    return f"{slug}.md", frontmatter.dumps(post, sort_keys=False) + "\n"
