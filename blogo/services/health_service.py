import asyncio
import datetime
import logging
import time
from pathlib import Path
from typing import Callable, Dict, Optional

from blogo.errors import CacheError
from blogo.result import Result, ok
from blogo.schemas.health import (
    HealthCheck,
    HealthStatus,
    RequestStats,
    SystemHealth,
    SystemMetrics,
)
from blogo.services.cache import TTLCache

logger = logging.getLogger(__name__)

VERSION = "1.0.0"
HEALTH_CHECK_KEY = "__health_check__"


class RequestMetrics:
    """Request totals fed by the HTTP middleware. Updated from the event loop only."""

    def __init__(self):
        self.total = 0
        self.errors = 0
        self.total_response_time = 0.0

    def record(self, response_time_ms: float, is_error: bool) -> None:
        self.total += 1
        self.total_response_time += response_time_ms
        if is_error:
            self.errors += 1

    def snapshot(self) -> RequestStats:
        average = self.total_response_time / self.total if self.total else 0.0
        return RequestStats(total=self.total, errors=self.errors, averageResponseTime=average)


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _check(name: str, status: HealthStatus, message: str, started: float) -> HealthCheck:
    return HealthCheck(
        name=name,
        status=status,
        message=message,
        duration=(time.perf_counter() - started) * 1000,
        timestamp=_now_iso(),
    )


class HealthService:
    def __init__(
        self,
        posts_dir,
        cache: TTLCache,
        metrics: RequestMetrics,
        started_at: Optional[float] = None,
        clock: Callable[[], float] = time.time,
        watched_caches: Optional[Dict[str, TTLCache]] = None,
    ):
        self.posts_dir = Path(posts_dir)
        self.cache = cache
        self.metrics = metrics
        self.clock = clock
        self.started_at = clock() if started_at is None else started_at
        self.watched_caches = watched_caches or {}

    async def check_file_system(self) -> HealthCheck:
        started = time.perf_counter()
        try:
            exists = await asyncio.to_thread(self.posts_dir.is_dir)
            if not exists:
                return _check("filesystem", "unhealthy", f"Posts directory not found: {self.posts_dir}", started)
            entries = await asyncio.to_thread(lambda: [p.name for p in self.posts_dir.iterdir()])
        except OSError as e:
            logger.error(f"Health check could not read {self.posts_dir}: {e}")
            return _check("filesystem", "unhealthy", f"File system error: {e}", started)

        if not any(name.endswith(".md") for name in entries):
            return _check("filesystem", "degraded", f"No markdown files in {self.posts_dir}", started)
        return _check("filesystem", "healthy", "File system accessible", started)

    async def check_cache(self) -> HealthCheck:
        started = time.perf_counter()
        probe = object()
        try:
            self.cache.set(HEALTH_CHECK_KEY, probe, 1)
            value = self.cache.get(HEALTH_CHECK_KEY)
            self.cache.delete(HEALTH_CHECK_KEY)
        except CacheError as e:
            logger.error(f"Cache health check failed: {e}")
            return _check("cache", "unhealthy", f"Cache error: {e.message}", started)

        if value is not probe:
            return _check("cache", "unhealthy", "Cache returned an unexpected value", started)
        return _check("cache", "healthy", "Cache operations working", started)

    def get_metrics(self) -> SystemMetrics:
        return SystemMetrics(
            uptime=self.clock() - self.started_at,
            requests=self.metrics.snapshot(),
            caches={name: cache.stats() for name, cache in self.watched_caches.items()},
        )

    async def check_health(self) -> Result[SystemHealth]:
        checks = list(await asyncio.gather(self.check_file_system(), self.check_cache()))
        statuses = {check.status for check in checks}
        if "unhealthy" in statuses:
            status = "unhealthy"
        elif "degraded" in statuses:
            status = "degraded"
        else:
            status = "healthy"

        return ok(
            SystemHealth(
                status=status,
                timestamp=_now_iso(),
                version=VERSION,
                uptime=self.clock() - self.started_at,
                checks=checks,
                metrics=self.get_metrics(),
            )
        )
