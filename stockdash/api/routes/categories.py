"""Category endpoints. Categories live only in the inventory manager."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from stockdash.api.deps import Manager, operation_response
from stockdash.core import collect_notifications
from stockdash.schemas.product import CategoryIn

router = APIRouter()


@router.get("", response_model=list[str])
async def list_categories(manager: Manager) -> list[str]:
    return manager.categories


@router.post("")
async def add_category(payload: CategoryIn, manager: Manager) -> JSONResponse:
    with collect_notifications() as raised:
        ok = manager.add_category(payload.name)
    return operation_response(ok, raised, data=manager.categories, success_status=status.HTTP_201_CREATED)


@router.delete("/{name:path}")
async def delete_category(name: str, manager: Manager) -> JSONResponse:
    with collect_notifications() as raised:
        ok = manager.delete_category(name)
    return operation_response(ok, raised, data=manager.categories)
