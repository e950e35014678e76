"""SQL Store - direct database access to the product and history tables.

Used when the service runs next to the database instead of going through
the hosted REST API. Rows are shaped exactly like the REST responses so the
inventory manager cannot tell the two stores apart.
"""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy import delete, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stockdash.infra.database import close_db_engine, get_db_session
from stockdash.infra.logging import get_logger
from stockdash.models import StockHistory, StockItem
from stockdash.services.store import Row, Store, StoreResult

logger = get_logger(__name__)

T = TypeVar("T")


class SqlStore(Store):
    """Store backed by an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        """Initialize SQL store.

        Args:
            session_factory: Session factory (defaults to the global one)
        """
        self._session_factory = session_factory

    async def close(self) -> None:
        """Dispose the global engine when this store owns it."""
        if self._session_factory is None:
            await close_db_engine()

    async def _run(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
    ) -> StoreResult[T]:
        """Run `work` in a session, turning any failure into a StoreResult."""
        try:
            async with get_db_session(self._session_factory) as session:
                data = await work(session)
            return StoreResult(data=data)
        except Exception as e:
            logger.error(
                "SQL store operation failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            return StoreResult.failure(str(e) or type(e).__name__, code=type(e).__name__)

    async def select_products(self) -> StoreResult[list[Row]]:
        async def work(session: AsyncSession) -> list[Row]:
            result = await session.execute(select(StockItem))
            return [
                {
                    "id": item.id,
                    "name": item.name,
                    "category": item.category,
                    "quantity": item.quantity,
                    "price": item.price,
                }
                for item in result.scalars().all()
            ]

        return await self._run("select_products", work)

    async def insert_product(self, row: Row) -> StoreResult[None]:
        async def work(session: AsyncSession) -> None:
            session.add(
                StockItem(
                    id=row["id"],
                    name=row["name"],
                    category=row.get("category"),
                    quantity=row["quantity"],
                    price=row["price"],
                )
            )

        return await self._run("insert_product", work)

    async def update_product(self, product_id: str, fields: Row) -> StoreResult[None]:
        values = {k: v for k, v in fields.items() if k in ("name", "category", "quantity", "price")}

        async def work(session: AsyncSession) -> None:
            await session.execute(update(StockItem).where(StockItem.id == product_id).values(**values))

        return await self._run("update_product", work)

    async def delete_product(self, product_id: str) -> StoreResult[None]:
        async def work(session: AsyncSession) -> None:
            await session.execute(delete(StockItem).where(StockItem.id == product_id))

        return await self._run("delete_product", work)

    async def insert_history(self, item_id: str, action: str) -> StoreResult[None]:
        async def work(session: AsyncSession) -> None:
            session.add(StockHistory(item_id=item_id, action=action))

        return await self._run("insert_history", work)

    async def delete_history(self, item_id: str) -> StoreResult[None]:
        async def work(session: AsyncSession) -> None:
            await session.execute(delete(StockHistory).where(StockHistory.item_id == item_id))

        return await self._run("delete_history", work)

    async def select_history(self) -> StoreResult[list[Row]]:
        async def work(session: AsyncSession) -> list[Row]:
            stmt = (
                select(
                    StockHistory.id,
                    StockHistory.action,
                    StockHistory.created_at,
                    StockHistory.item_id,
                    StockItem.name,
                    StockItem.quantity,
                )
                .outerjoin(StockItem, StockHistory.item_id == StockItem.id)
                .order_by(StockHistory.created_at.desc())
            )
            result = await session.execute(stmt)
            return [_history_row(r) for r in result.all()]

        return await self._run("select_history", work)

    async def ping(self) -> bool:
        async def work(session: AsyncSession) -> None:
            await session.execute(text("SELECT 1"))

        result = await self._run("ping", work)
        return result.ok


def _history_row(record: Any) -> Row:
    """Shape a joined result row like the REST embedded select."""
    id_, action, created_at, item_id, name, quantity = record
    joined = None if name is None else {"name": name, "quantity": quantity}
    return {
        "id": id_,
        "action": action,
        "created_at": created_at,
        "item_id": item_id,
        "stock_items": joined,
    }
