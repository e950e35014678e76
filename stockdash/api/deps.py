"""FastAPI dependencies and response helpers."""

from typing import Annotated, Any

from fastapi import Depends, status
from fastapi.responses import JSONResponse

from stockdash.core import InventoryManager, get_inventory_manager
from stockdash.schemas.common import Notification, OperationResult
from stockdash.services import Store, get_store


async def get_manager() -> InventoryManager:
    """Inventory manager dependency."""
    return get_inventory_manager()


async def get_store_dependency() -> Store:
    """Store dependency."""
    return get_store()


# Type aliases for cleaner annotations
Manager = Annotated[InventoryManager, Depends(get_manager)]
StoreDep = Annotated[Store, Depends(get_store_dependency)]


def operation_response(
    success: bool,
    notifications: list[Notification],
    data: Any = None,
    success_status: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Wrap a manager result in an OperationResult body.

    Failed operations answer 400 so clients can branch on status alone.
    """
    body = OperationResult[Any](success=success, data=data, notifications=notifications)
    return JSONResponse(
        status_code=success_status if success else status.HTTP_400_BAD_REQUEST,
        content=body.model_dump(mode="json"),
    )
