"""History endpoint."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from stockdash.api.deps import Manager, operation_response
from stockdash.core import collect_notifications

router = APIRouter()


@router.get("")
async def list_history(manager: Manager) -> JSONResponse:
    """History entries with product name and quantity, newest first.

    A store failure answers 400 with the "Failed to load history"
    notification and no entries.
    """
    with collect_notifications() as raised:
        entries = await manager.list_history()
    failed = any(n.variant == "destructive" for n in raised)
    return operation_response(
        not failed,
        raised,
        data=[entry.model_dump(mode="json") for entry in entries],
    )
