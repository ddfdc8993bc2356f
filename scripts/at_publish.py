import argparse
import asyncio
import logging
import sys

from blogo.container import create_container
from blogo.errors import AppError, format_error
from blogo.services.atproto_client import AtProtoClient
from blogo.services.atproto_service import AtProtoService
from blogo.settings import settings

logger = logging.getLogger(__name__)


async def run(command: str, slug: str = None, force: bool = False) -> int:
    if not settings.atproto_configured:
        logger.error("ATPROTO_DID, ATPROTO_HANDLE and ATPROTO_APP_PASSWORD must be set")
        return 2

    container = create_container(settings)
    client = AtProtoClient(
        settings.ATPROTO_SERVICE,
        settings.ATPROTO_HANDLE,
        settings.ATPROTO_APP_PASSWORD,
        timeout=settings.ATPROTO_TIMEOUT_SECONDS,
    )
    service = AtProtoService(
        client,
        container.content_service,
        container.repo,
        publication_uri=settings.publication_uri,
        public_url=settings.public_url,
        blog_name=settings.BLOG_TITLE,
        blog_description=settings.BLOG_DESCRIPTION,
    )

    try:
        await client.create_session()
        if command == "publish":
            publication = await service.ensure_publication()
            if not publication.is_ok:
                logger.error(format_error(publication.error))
                return 1
            result = await (service.publish_post(slug) if slug else service.publish_all())
        else:
            result = await service.pull_all(force=force)
    except AppError as e:
        logger.error(format_error(e))
        return 1
    finally:
        await client.aclose()
        container.dispose()

    if not result.is_ok:
        logger.error(format_error(result.error))
        return 1

    report = result.value
    logger.info(f"Done: {report}")
    errors = getattr(report, "errors", [])
    for error in errors:
        logger.error(f"  {error}")
    return 1 if errors else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sync posts with an AT Protocol PDS.")
    sub = parser.add_subparsers(dest="command", required=True)
    publish = sub.add_parser("publish", help="publish posts as site.standard.document records")
    publish.add_argument("slug", nargs="?", help="publish only this post")
    pull = sub.add_parser("pull", help="write remote documents into the posts directory")
    pull.add_argument("--force", action="store_true", help="overwrite existing files")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(run(args.command, getattr(args, "slug", None), getattr(args, "force", False))))
