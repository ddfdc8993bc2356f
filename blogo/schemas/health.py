from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

HealthStatus = Literal["healthy", "degraded", "unhealthy"]


class HealthCheck(BaseModel):
    name: str
    status: HealthStatus
    message: Optional[str] = None
    duration: Optional[float] = None
    timestamp: str


class RequestStats(BaseModel):
    total: int = 0
    errors: int = 0
    averageResponseTime: float = 0.0


class CacheStats(BaseModel):
    hits: int = 0
    misses: int = 0
    size: int = 0
    hitRate: Optional[float] = None


class SystemMetrics(BaseModel):
    uptime: float = 0.0
    requests: RequestStats
    caches: Dict[str, CacheStats] = Field(default_factory=dict)


class SystemHealth(BaseModel):
    status: HealthStatus
    timestamp: str
    version: str
    uptime: float
    checks: List[HealthCheck]
    metrics: SystemMetrics
