import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogo.container import Container, create_container
from blogo.errors import AppError, NotFoundError, format_error
from blogo.routers import feeds, health, pages, posts
from blogo.services.file_watcher import PostsWatcher
from blogo.settings import settings
from blogo.templating import render

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

JSON_PREFIXES = ("/api/", "/views/", "/health")


def _wants_json(request: Request) -> bool:
    return request.url.path.startswith(JSON_PREFIXES)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: Optional[Container] = getattr(app.state, "container", None)
    owns_container = container is None
    if owns_container:
        container = create_container(settings)
        app.state.container = container

    config = container.settings
    if config.WARM_CACHE_ON_STARTUP:
        warmed = await container.content_service.warm()
        if not warmed.is_ok:
            logger.warning(f"Starting with a cold cache: {warmed.error}")

    watcher = None
    if config.watch_enabled:
        watcher = PostsWatcher(container.content_service, config.POSTS_DIR)
        try:
            watcher.start()
        except OSError as e:
            logger.error(f"File watcher could not start on {config.POSTS_DIR}: {e}")
            watcher = None

    try:
        yield
    finally:
        if watcher is not None:
            await watcher.stop()
        if owns_container:
            container.dispose()
        logger.info("Shutdown complete")


async def app_error_handler(request: Request, exc: AppError):
    status_code = 404 if isinstance(exc, NotFoundError) else 500
    if status_code == 500:
        logger.error(format_error(exc))
    if _wants_json(request):
        return JSONResponse({"error": exc.kind, "message": exc.message}, status_code=status_code)
    return render(request, "error.html", {"status_code": status_code, "message": exc.message}, status_code)


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code != 404 or _wants_json(request):
        return await http_exception_handler(request, exc)
    return render(request, "error.html", {"status_code": 404, "message": "Page not found"}, 404)


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error handling {request.url.path}: {exc}")
    if _wants_json(request):
        return JSONResponse({"error": "InternalError", "message": "Internal server error"}, status_code=500)
    return render(request, "error.html", {"status_code": 500, "message": "Internal server error"}, 500)


def create_app(container: Optional[Container] = None) -> FastAPI:
    app = FastAPI(title="Blogo", description="A minimal file-backed blog", lifespan=lifespan)
    if container is not None:
        app.state.container = container

    @app.middleware("http")
    async def record_request_metrics(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        current = getattr(request.app.state, "container", None)
        if current is not None:
            current.metrics.record((time.perf_counter() - started) * 1000, response.status_code >= 400)
        return response

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(pages.router)
    app.include_router(posts.router)
    app.include_router(feeds.router)
    app.include_router(health.router)

    public_dir = Path((container.settings if container is not None else settings).PUBLIC_DIR)
    if public_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(public_dir)), name="static")

    return app


app = create_app()
