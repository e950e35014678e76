"""Dashboard statistics endpoint."""

from fastapi import APIRouter

from stockdash.api.deps import Manager
from stockdash.schemas.product import DashboardStats

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(manager: Manager) -> DashboardStats:
    """Product count, inventory value, low-stock count and recent orders."""
    return manager.stats()
