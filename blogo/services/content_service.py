import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from blogo.errors import AppError, CacheError, FileSystemError, NotFoundError, ParseError, ValidationError
from blogo.repos.posts_repo import FilePostsRepo
from blogo.result import Result, err, ok
from blogo.schemas.blog import Post, PostMeta, TagInfo
from blogo.services.cache import TTLCache
from blogo.services.frontmatter_parser import ParsedPost, parse_post_file
from blogo.services.markdown_renderer import MarkdownRenderer
from blogo.utils import calculate_reading_time, format_date, slugify, strip_html

logger = logging.getLogger(__name__)

ALL_POSTS_KEY = "posts:all"
METADATA_KEY = "posts:metadata"


@dataclass(frozen=True)
class FileLoadError:
    path: str
    error: AppError


def _sort_by_date(items):
    # sorted() is stable, so equal dates keep the filename order of the listing
    return sorted(items, key=lambda item: item.date, reverse=True)


class ContentService:
    """
    Loads markdown posts from the posts directory and keeps three cache tiers:
    the rendered collection, the metadata-only collection and single posts by slug.
    """

    def __init__(
        self,
        repo: FilePostsRepo,
        renderer: MarkdownRenderer,
        posts_cache: TTLCache[List[Post]],
        metadata_cache: TTLCache[List[PostMeta]],
        post_cache: TTLCache[Post],
        view_counts=None,
        cache_ttl: Optional[float] = 300,
    ):
        self.repo = repo
        self.renderer = renderer
        self.posts_cache = posts_cache
        self.metadata_cache = metadata_cache
        self.post_cache = post_cache
        self.view_counts = view_counts
        self.cache_ttl = cache_ttl
        self.scan_count = 0
        # bumped by invalidate(); loads that started under an older generation are not cached
        self.generation = 0
        self.last_load_errors: List[FileLoadError] = []

    async def load_posts(self) -> Result[List[Post]]:
        try:
            cached = self.posts_cache.get(ALL_POSTS_KEY)
        except CacheError as e:
            logger.error(f"Posts cache lookup failed: {e}")
            return err(e)
        if cached is not None:
            logger.debug("Using cached posts")
            return ok(cached)

        logger.info(f"Loading posts from {self.repo.posts_dir}")
        generation = self.generation
        loaded = await self._load_all(render=True)
        if not loaded.is_ok:
            return loaded

        posts = loaded.value
        if generation == self.generation:
            try:
                self.posts_cache.set(ALL_POSTS_KEY, posts, self.cache_ttl)
            except CacheError as e:
                logger.error(f"Failed to store posts in cache: {e}")
                return err(e)
        else:
            logger.debug("Posts changed while loading, result not cached")

        logger.info(f"Loaded {len(posts)} posts")
        return ok(posts)

    async def load_posts_metadata_with_views(self) -> Result[List[PostMeta]]:
        try:
            metadata = self.metadata_cache.get(METADATA_KEY)
        except CacheError as e:
            logger.error(f"Metadata cache lookup failed: {e}")
            return err(e)

        if metadata is None:
            generation = self.generation
            loaded = await self._load_all(render=False)
            if not loaded.is_ok:
                return loaded
            metadata = loaded.value
            if generation == self.generation:
                try:
                    self.metadata_cache.set(METADATA_KEY, metadata, self.cache_ttl)
                except CacheError as e:
                    logger.error(f"Failed to store metadata in cache: {e}")
                    return err(e)
        else:
            logger.debug("Using cached post metadata")

        views = await self._fetch_view_counts()
        return ok([meta.model_copy(update={"viewCount": views.get(meta.slug, 0)}) for meta in metadata])

    async def get_post_by_slug(self, slug: str) -> Result[Post]:
        try:
            cached = self.post_cache.get(slug)
        except CacheError as e:
            return err(e)
        if cached is not None:
            return ok(cached)

        generation = self.generation
        loaded = await self.load_posts()
        if not loaded.is_ok:
            return loaded

        post = next((p for p in loaded.value if p.slug == slug), None)
        if post is None:
            return err(NotFoundError(f"Post not found: {slug}"))

        if generation == self.generation:
            try:
                self.post_cache.set(slug, post, self.cache_ttl)
            except CacheError as e:
                return err(e)
        return ok(post)

    async def get_posts_by_tag(self, tag: str) -> Result[List[Post]]:
        loaded = await self.load_posts()
        if not loaded.is_ok:
            return loaded
        return ok([post for post in loaded.value if tag in post.tags])

    async def get_all_tags(self) -> Result[List[TagInfo]]:
        loaded = await self.load_posts()
        if not loaded.is_ok:
            return loaded

        tags: Dict[str, TagInfo] = {}
        for post in loaded.value:
            for name in post.tags:
                info = tags.get(name)
                if info is None:
                    info = tags[name] = TagInfo(name=name, count=0, posts=[])
                info.count += 1
                info.posts.append(post)

        return ok(sorted(tags.values(), key=lambda t: (-t.count, t.name)))

    async def search_posts(self, query: str) -> Result[List[Post]]:
        needle = (query or "").strip().lower()
        if not needle:
            return ok([])

        loaded = await self.load_posts()
        if not loaded.is_ok:
            return loaded

        def matches(post: Post) -> bool:
            if needle in post.title.lower():
                return True
            if post.excerpt and needle in post.excerpt.lower():
                return True
            if any(needle in tag.lower() for tag in post.tags):
                return True
            return needle in strip_html(post.content).lower()

        return ok([post for post in loaded.value if matches(post)])

    def invalidate(self) -> None:
        self.generation += 1
        self.posts_cache.clear()
        self.metadata_cache.clear()
        self.post_cache.clear()
        logger.info("Content caches invalidated")

    async def warm(self) -> Result[List[Post]]:
        posts = await self.load_posts()
        if not posts.is_ok:
            logger.error(f"Cache warm-up failed: {posts.error}")
            return posts
        metadata = await self.load_posts_metadata_with_views()
        if not metadata.is_ok:
            logger.error(f"Metadata warm-up failed: {metadata.error}")
            return metadata
        logger.info(f"Cache warmed with {len(posts.value)} posts")
        return posts

    async def read_raw(self, slug: str) -> Result[str]:
        """Return the markdown body (without frontmatter) of the post with this slug."""
        try:
            files = await self.repo.list_markdown_files()
        except FileSystemError as e:
            return err(e)

        for path in files:
            try:
                text = await self.repo.read_text(path)
            except FileSystemError:
                continue
            parsed = parse_post_file(text, str(path))
            if parsed.is_ok and self._slug_for(path, parsed.value) == slug:
                return ok(parsed.value.body)
        return err(NotFoundError(f"Post not found: {slug}"))

    async def _load_all(self, render: bool) -> Result[list]:
        try:
            files = await self.repo.list_markdown_files()
        except FileSystemError as e:
            logger.error(f"Failed to list posts: {e}")
            return err(e)
        self.scan_count += 1

        if not files:
            logger.warning(f"No markdown files found in {self.repo.posts_dir}")
            self.last_load_errors = []
            return ok([])

        texts = await asyncio.gather(*(self._read(path) for path in files))

        items = []
        failures: List[FileLoadError] = []
        seen_slugs: Dict[str, Path] = {}
        for path, text in zip(files, texts):
            built = self._build(path, text, render) if isinstance(text, str) else err(text)
            if built.is_ok:
                item = built.value
                if item.slug in seen_slugs:
                    built = err(
                        ValidationError(
                            f"Duplicate slug '{item.slug}' already used by {seen_slugs[item.slug].name}",
                            errors=[f"slug: '{item.slug}' is not unique"],
                            path=str(path),
                        )
                    )
                else:
                    seen_slugs[item.slug] = path
                    items.append(item)
                    continue

            logger.warning(f"Skipping {path}: {built.error}")
            failures.append(FileLoadError(path=str(path), error=built.error))

        self.last_load_errors = failures
        if not items:
            first = failures[0].error
            return err(ParseError(f"Failed to load all {len(failures)} post files", first, path=first.path))

        return ok(_sort_by_date(items))

    async def _read(self, path: Path):
        try:
            return await self.repo.read_text(path)
        except FileSystemError as e:
            return e

    def _build(self, path: Path, text: str, render: bool) -> Result:
        parsed = parse_post_file(text, str(path))
        if not parsed.is_ok:
            return parsed

        fm = parsed.value.frontmatter
        slug = self._slug_for(path, parsed.value)
        if not slug:
            return err(
                ValidationError(
                    f"Cannot derive a slug from {path.name}", errors=["slug: filename has no usable characters"], path=str(path)
                )
            )
        fields = dict(
            slug=slug,
            title=fm.title,
            date=fm.date,
            excerpt=fm.excerpt,
            tags=list(fm.tags or []),
            modified=fm.modified,
            formattedDate=format_date(fm.date),
            readingTime=calculate_reading_time(parsed.value.body),
        )
        if not render:
            return ok(PostMeta(**fields))

        try:
            content = self.renderer.render(parsed.value.body)
        except ParseError as e:
            e.path = str(path)
            return err(e)
        return ok(Post(**fields, content=content))

    @staticmethod
    def _slug_for(path: Path, parsed: ParsedPost) -> str:
        return parsed.frontmatter.slug or slugify(path.stem)

    async def _fetch_view_counts(self) -> Dict[str, int]:
        if self.view_counts is None:
            return {}
        try:
            return await asyncio.to_thread(self.view_counts.get_all_view_counts)
        except Exception as e:
            logger.warning(f"Failed to fetch view counts, defaulting to 0: {e}")
            return {}

    async def get_view_count(self, slug: str) -> int:
        if self.view_counts is None:
            return 0
        try:
            return await asyncio.to_thread(self.view_counts.get_view_count, slug)
        except Exception as e:
            logger.warning(f"Failed to fetch view count for {slug}: {e}")
            return 0

    async def increment_view(self, slug: str) -> Result[int]:
        """Record one view of an existing post and return the new count."""
        post = await self.get_post_by_slug(slug)
        if not post.is_ok:
            return post
        if self.view_counts is None:
            return ok(0)
        try:
            return ok(await asyncio.to_thread(self.view_counts.increment_view, slug))
        except Exception as e:
            logger.error(f"Failed to record view for {slug}: {e}")
            return err(AppError(f"Failed to record view for {slug}", e))
