import asyncio
import logging
from pathlib import Path
from typing import Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from blogo.services.content_service import ContentService

logger = logging.getLogger(__name__)


class PostsEventHandler(FileSystemEventHandler):
    """Forwards every create/modify/delete/move in the posts directory to the watcher."""

    def __init__(self, watcher: "PostsWatcher"):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in ("created", "modified", "deleted", "moved"):
            return
        name = Path(str(event.src_path)).name
        if name.startswith(".") or name.endswith("~"):
            return
        logger.debug(f"File event: {event.event_type} - {event.src_path}")
        self.watcher.notify(event.event_type, str(event.src_path))


class PostsWatcher:
    """
    Invalidates every content cache tier on any change under the posts directory
    and re-warms them in the background.

    Watchdog callbacks run on the observer thread; they are handed to the event
    loop with loop.call_soon_threadsafe(), so cache state is only touched on the
    loop thread. One re-warm runs at a time; events arriving while it runs are
    dropped.
    """

    def __init__(self, content_service: ContentService, posts_dir, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.content_service = content_service
        self.posts_dir = Path(posts_dir)
        self.loop = loop
        self.observer: Optional[Observer] = None
        self.warming = False
        self.rewarm_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self.observer is not None

    def start(self) -> None:
        if self.observer is not None:
            return
        if self.loop is None:
            self.loop = asyncio.get_running_loop()

        observer = Observer()
        observer.schedule(PostsEventHandler(self), str(self.posts_dir), recursive=True)
        observer.daemon = True
        observer.start()
        self.observer = observer
        logger.info(f"Watching {self.posts_dir} for changes")

    def notify(self, event_type: str, path: str) -> None:
        """Called from the observer thread."""
        if self.loop is None or self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(self.handle_change, event_type, path)

    def handle_change(self, event_type: str, path: str) -> None:
        if self.warming:
            logger.debug(f"Re-warm in progress, dropping {event_type} event for {path}")
            return

        logger.info(f"Posts changed ({event_type}: {path}), invalidating caches")
        self.content_service.invalidate()
        self.warming = True
        self.rewarm_task = self.loop.create_task(self._rewarm())

    async def _rewarm(self) -> None:
        try:
            result = await self.content_service.warm()
            if not result.is_ok:
                logger.error(f"Re-warm after file change failed: {result.error}")
        finally:
            self.warming = False

    async def stop(self) -> None:
        observer, self.observer = self.observer, None
        if observer is not None:
            observer.stop()
            await asyncio.to_thread(observer.join, 10)
            logger.info("File watcher stopped")

        task, self.rewarm_task = self.rewarm_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
