"""
Health Check Endpoints
---------------------
Liveness of the API and reachability of PostgreSQL and Redis.
"""

from fastapi import APIRouter, Depends
from loguru import logger

from trustgate.auth.dependencies import get_container
from trustgate.core.container import ServiceContainer
from trustgate.models.health_models import DependencyHealth, HealthStatus


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=HealthStatus)
async def health_check(container: ServiceContainer = Depends(get_container)):
    return HealthStatus(status="healthy", version=container.settings.app_version)


@router.get("/dependencies", response_model=DependencyHealth)
async def check_dependencies(container: ServiceContainer = Depends(get_container)):
    """
    Ping PostgreSQL and Redis.

    Answers 200 even when a store is down; the body carries the per-store result.
    """
    database, redis = container.database_manager, container.redis_manager
    report = DependencyHealth.from_checks(
        postgresql=database is not None and await database.ping(),
        redis=redis is not None and await redis.ping(),
    )

    if report.status != "healthy":
        logger.warning(
            f"Dependency check failed: postgresql={report.postgresql}, redis={report.redis}"
        )
    return report
