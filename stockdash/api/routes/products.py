"""Product endpoints: list, refresh, create, update, delete, export."""

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse, Response

from stockdash.api.deps import Manager, operation_response
from stockdash.core import collect_notifications
from stockdash.core.export import EXPORT_FILENAME, EXPORT_MEDIA_TYPE
from stockdash.infra.logging import get_logger
from stockdash.schemas.product import NewProduct, Product, ProductListResponse, ProductUpdate

router = APIRouter()
logger = get_logger(__name__)


@router.get("", response_model=ProductListResponse)
async def list_products(
    manager: Manager,
    search: str | None = Query(default=None, description="Case-insensitive name filter"),
    category: str | None = Query(default=None, description="Exact category filter"),
) -> ProductListResponse:
    """Current product list, optionally filtered."""
    return ProductListResponse(
        products=manager.filter_products(search=search, category=category),
        is_loading=manager.is_loading,
    )


@router.post("/refresh")
async def refresh_products(manager: Manager) -> JSONResponse:
    """Reload products from the store."""
    with collect_notifications() as raised:
        ok = await manager.fetch_products()
    return operation_response(ok, raised, data=[p.model_dump(mode="json") for p in manager.products])


@router.post("")
async def create_product(payload: NewProduct, manager: Manager) -> JSONResponse:
    """Add a product."""
    with collect_notifications() as raised:
        product = await manager.create_product(payload)
    return operation_response(
        product is not None,
        raised,
        data=product.model_dump(mode="json") if product else None,
        success_status=status.HTTP_201_CREATED,
    )


@router.put("/{product_id}")
async def update_product(product_id: str, payload: ProductUpdate, manager: Manager) -> JSONResponse:
    """Replace a product's fields."""
    product = Product(id=product_id, **payload.model_dump())
    with collect_notifications() as raised:
        ok = await manager.update_product(product)
    return operation_response(ok, raised, data=product.model_dump(mode="json") if ok else None)


@router.delete("/{product_id}")
async def delete_product(product_id: str, manager: Manager) -> JSONResponse:
    """Delete a product and its history."""
    with collect_notifications() as raised:
        ok = await manager.delete_product(product_id)
    return operation_response(ok, raised)


@router.get("/export")
async def export_products(manager: Manager) -> Response:
    """Download the product list as CSV."""
    content = manager.export_csv()
    logger.info("Products exported", count=len(manager.products))
    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
