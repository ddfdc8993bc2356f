import logging

import uvicorn

from blogo.settings import settings

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info(f"Serving {settings.BLOG_TITLE} on http://{settings.HOST}:{settings.PORT} ({settings.ENVIRONMENT})")
    uvicorn.run(
        "blogo.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
