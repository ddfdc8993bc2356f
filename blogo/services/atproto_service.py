import logging
from typing import Optional

from blogo.errors import AppError, NetworkError
from blogo.repos.posts_repo import FilePostsRepo
from blogo.result import Result, err, ok
from blogo.schemas.atproto import (
    DOCUMENT_COLLECTION,
    PUBLICATION_COLLECTION,
    Publication,
    PublishReport,
    PullReport,
    PutRecordResponse,
    StandardDocument,
)
from blogo.services.atproto_client import AtProtoClient
from blogo.services.atproto_mapping import document_to_markdown, post_to_document, slug_to_rkey
from blogo.services.content_service import ContentService

logger = logging.getLogger(__name__)

PUBLICATION_RKEY = "self"
PAGE_SIZE = 100


class AtProtoService:
    """Publishes posts as site.standard.document records and pulls them back as markdown files."""

    def __init__(
        self,
        client: AtProtoClient,
        content_service: ContentService,
        repo: FilePostsRepo,
        publication_uri: str,
        public_url: str,
        blog_name: str,
        blog_description: str = "",
    ):
        self.client = client
        self.content_service = content_service
        self.repo = repo
        self.publication_uri = publication_uri
        self.public_url = public_url
        self.blog_name = blog_name
        self.blog_description = blog_description

    async def ensure_publication(self) -> Result[PutRecordResponse]:
        record = Publication(url=self.public_url, name=self.blog_name, description=self.blog_description or None)
        logger.info("Ensuring publication record exists")
        try:
            return ok(await self.client.put_record(PUBLICATION_COLLECTION, PUBLICATION_RKEY, record.to_record()))
        except NetworkError as e:
            logger.error(f"Failed to write publication record: {e}")
            return err(e)

    async def publish_post(self, slug: str) -> Result[PutRecordResponse]:
        post = await self.content_service.get_post_by_slug(slug)
        if not post.is_ok:
            return post
        raw = await self.content_service.read_raw(slug)
        if not raw.is_ok:
            return raw

        doc = post_to_document(post.value, raw.value, self.publication_uri, self.public_url)
        rkey = slug_to_rkey(slug)
        logger.info(f"Publishing: {slug} -> {rkey}")
        try:
            return ok(await self.client.put_record(DOCUMENT_COLLECTION, rkey, doc.to_record()))
        except NetworkError as e:
            return err(e)

    async def publish_all(self) -> Result[PublishReport]:
        posts = await self.content_service.load_posts()
        if not posts.is_ok:
            return posts

        report = PublishReport()
        for failure in self.content_service.last_load_errors:
            report.errors.append(f"{failure.path}: {failure.error.message}")

        for post in posts.value:
            result = await self.publish_post(post.slug)
            if result.is_ok:
                report.published += 1
            else:
                report.errors.append(f"{post.slug}: {result.error.message}")
                logger.error(f"Failed to publish {post.slug}: {result.error}")

        logger.info(
            f"Publish complete: {report.published} published, {report.skipped} skipped, {len(report.errors)} errors"
        )
        return ok(report)

    async def pull_all(self, force: bool = False) -> Result[PullReport]:
        report = PullReport()
        cursor: Optional[str] = None

        while True:
            try:
                page = await self.client.list_records(
                    DOCUMENT_COLLECTION, StandardDocument, limit=PAGE_SIZE, cursor=cursor
                )
            except NetworkError as e:
                return err(NetworkError("Failed to list records from PDS", e, retryable=e.retryable))

            for entry in page.records:
                try:
                    filename, content = document_to_markdown(entry.value)
                except AppError as e:
                    report.errors.append(f"{entry.uri}: {e.message}")
                    logger.error(f"Skipping {entry.uri}: {e}")
                    continue
                path = self.repo.path_for(filename)

                if not force and await self.repo.exists(path):
                    report.skipped += 1
                    logger.debug(f"Skipping existing file: {filename}")
                    continue

                try:
                    await self.repo.write_text(path, content)
                except AppError as e:
                    report.errors.append(f"{filename}: {e.message}")
                    logger.error(f"Failed to write {filename}: {e}")
                    continue
                report.pulled += 1
                logger.info(f"Pulled: {filename}")

            cursor = page.cursor
            if not cursor or not page.records:
                break

        if report.pulled:
            self.content_service.invalidate()

        logger.info(f"Pull complete: {report.pulled} pulled, {report.skipped} skipped, {len(report.errors)} errors")
        return ok(report)
