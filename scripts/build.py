import argparse
import asyncio
import logging
import sys

from blogo.container import create_container
from blogo.errors import format_error
from blogo.main import create_app
from blogo.services.static_builder import StaticBuilder
from blogo.settings import settings

logger = logging.getLogger(__name__)


async def build(output_dir: str, base_url: str) -> int:
    container = create_container(settings)
    try:
        app = create_app(container)
        builder = StaticBuilder(
            app,
            container.content_service,
            output_dir=output_dir,
            public_dir=settings.PUBLIC_DIR,
            base_url=base_url,
            include_publication=settings.atproto_configured,
        )
        result = await builder.build()
    finally:
        container.dispose()

    if not result.is_ok:
        logger.error(f"Build failed:\n{format_error(result.error)}")
        return 1

    report = result.value
    for failure in container.content_service.last_load_errors:
        logger.warning(f"Skipped {failure.path}: {failure.error.message}")
    for error in report.errors:
        logger.error(f"  {error}")
    logger.info(f"Wrote {report.pages} pages and {report.assets} assets to {output_dir}/")
    return 1 if report.errors else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Render the blog into a static site.")
    parser.add_argument("--out", default="dist", help="output directory (cleaned first)")
    parser.add_argument("--base-url", default=settings.public_url, help="absolute URL the site is served from")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(build(args.out, args.base_url)))
