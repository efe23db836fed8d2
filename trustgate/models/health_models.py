"""
Health Check Models
-------------------
Payloads for /health and /health/dependencies.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

ServiceState = Literal["healthy", "unhealthy"]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _Probe(BaseModel):
    status: ServiceState
    timestamp: datetime = Field(default_factory=_utc_now)


class HealthStatus(_Probe):
    """Liveness of the API process itself."""

    version: Optional[str] = None


class DependencyHealth(_Probe):
    """One boolean per backing store; `status` is unhealthy if either is False."""

    postgresql: bool
    redis: bool

    @classmethod
    def from_checks(cls, postgresql: bool, redis: bool) -> "DependencyHealth":
        return cls(
            postgresql=postgresql,
            redis=redis,
            status="healthy" if postgresql and redis else "unhealthy",
        )
