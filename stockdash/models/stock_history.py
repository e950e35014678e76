"""StockHistory model - append-only audit log of product actions."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockdash.models.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from stockdash.models.stock_item import StockItem


class StockHistory(Base, CreatedAtMixin):
    """History entry for a product.

    Maps to the `stock_history` table. The foreign key has no ON DELETE
    cascade; entries must be removed before their product.
    """

    __tablename__ = "stock_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("stock_items.id"),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(String(20), nullable=False)

    item: Mapped["StockItem"] = relationship(
        "StockItem",
        back_populates="history",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<StockHistory(id={self.id}, item_id='{self.item_id}', action='{self.action}')>"
