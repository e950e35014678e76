"""Health check endpoints.

`/health` and `/health/live` only prove the process answers. `/health/ready`
also pings the configured store, so a dashboard pointed at an unreachable
backend reports "degraded" instead of serving empty product lists.
"""

from fastapi import APIRouter

from stockdash import __version__
from stockdash.api.deps import StoreDep
from stockdash.config import settings
from stockdash.infra.logging import get_logger
from stockdash.schemas.common import HealthResponse
from stockdash.services import Store

router = APIRouter()
logger = get_logger(__name__)


def _report(checks: dict[str, bool]) -> HealthResponse:
    return HealthResponse(
        status="healthy" if all(checks.values()) else "degraded",
        version=__version__,
        environment=settings.environment,
        checks=checks,
    )


async def _store_reachable(store: Store) -> bool:
    try:
        return await store.ping()
    except Exception as e:
        logger.warning(
            "Store ping raised",
            store_backend=settings.store_backend,
            error=str(e),
        )
        return False


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Basic health check. Returns 200 if the service is running."""
    return _report({})


@router.get("/health/ready", response_model=HealthResponse)
async def health_ready(store: StoreDep) -> HealthResponse:
    """Readiness check against the configured store."""
    return _report({"store": await _store_reachable(store)})


@router.get("/health/live", response_model=HealthResponse)
async def health_live() -> HealthResponse:
    return _report({"alive": True})
