import asyncio
import logging
import shutil
from pathlib import Path
from typing import List
from urllib.parse import quote, unquote

import httpx
from pydantic import BaseModel, Field

from blogo.errors import FileSystemError
from blogo.result import Result, err, ok
from blogo.services.content_service import ContentService
from blogo.services.topics import group_tags_by_topic

logger = logging.getLogger(__name__)

FIXED_PAGES = ["/", "/about", "/tags"]
VERBATIM_ROUTES = ["/feed.xml", "/rss.xml", "/atom.xml", "/sitemap.xml", "/robots.txt"]
PUBLICATION_ROUTE = "/.well-known/site.standard.publication"
STATIC_DIR = "static"


class BuildReport(BaseModel):
    pages: int = 0
    assets: int = 0
    errors: List[str] = Field(default_factory=list)


def output_path(output_dir: Path, route: str) -> Path:
    """Map a route onto the file that serves it from a static host."""
    if route == "/":
        return output_dir / "index.html"
    relative = unquote(route).lstrip("/")
    if route in VERBATIM_ROUTES or route == PUBLICATION_ROUTE:
        return output_dir / relative
    return output_dir / relative / "index.html"


def _reset_dir(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)


def _copy_public(source: Path, target: Path) -> int:
    if not source.is_dir():
        return 0
    shutil.copytree(source, target, dirs_exist_ok=True)
    return sum(1 for p in source.rglob("*") if p.is_file())


def _write(path: Path, body: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(body)


class StaticBuilder:
    """Renders every GET route of the app in-process and writes the results under output_dir."""

    def __init__(
        self,
        app,
        content_service: ContentService,
        output_dir,
        public_dir,
        base_url: str = "http://localhost",
        include_publication: bool = False,
    ):
        self.app = app
        self.content_service = content_service
        self.output_dir = Path(output_dir)
        self.public_dir = Path(public_dir)
        self.base_url = base_url.rstrip("/")
        self.include_publication = include_publication

    async def routes(self) -> Result[List[str]]:
        posts = await self.content_service.load_posts()
        if not posts.is_ok:
            return posts
        tags = await self.content_service.get_all_tags()
        if not tags.is_ok:
            return tags

        routes = list(FIXED_PAGES) + list(VERBATIM_ROUTES)
        if self.include_publication:
            routes.append(PUBLICATION_ROUTE)
        routes += [f"/posts/{post.slug}" for post in posts.value]
        routes += [f"/tags/{quote(tag.name, safe='')}" for tag in tags.value]
        routes += [f"/topics/{group.slug}" for group in group_tags_by_topic(tags.value)]
        return ok(routes)

    async def build(self) -> Result[BuildReport]:
        report = BuildReport()

        logger.info(f"Cleaning {self.output_dir}/")
        try:
            await asyncio.to_thread(_reset_dir, self.output_dir)
            logger.info(f"Copying {self.public_dir}/ to {self.output_dir}/static/")
            report.assets = await asyncio.to_thread(_copy_public, self.public_dir, self.output_dir / STATIC_DIR)
        except OSError as e:
            return err(FileSystemError(f"Failed to prepare {self.output_dir}", e, path=str(self.output_dir)))

        routes = await self.routes()
        if not routes.is_ok:
            return routes

        transport = httpx.ASGITransport(app=self.app)
        async with httpx.AsyncClient(transport=transport, base_url=self.base_url) as client:
            for route in routes.value:
                try:
                    response = await client.get(route)
                except Exception as e:
                    report.errors.append(f"{route}: {e}")
                    logger.error(f"Failed to render {route}: {e}")
                    continue

                if response.status_code != 200:
                    report.errors.append(f"{route}: HTTP {response.status_code}")
                    logger.error(f"Failed to render {route}: HTTP {response.status_code}")
                    continue

                target = output_path(self.output_dir, route)
                try:
                    await asyncio.to_thread(_write, target, response.content)
                except OSError as e:
                    report.errors.append(f"{route}: {e}")
                    continue
                report.pages += 1
                logger.debug(f"Generated: {target}")

        logger.info(f"Build complete: {report.pages} pages, {report.assets} assets, {len(report.errors)} errors")
        return ok(report)
