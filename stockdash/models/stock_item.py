"""StockItem model - the product table."""

from typing import TYPE_CHECKING

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockdash.models.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from stockdash.models.stock_history import StockHistory


class StockItem(Base, CreatedAtMixin):
    """Inventory product row.

    Maps to the `stock_items` table. The id is generated by the client
    before insert, so there is no autoincrement.
    """

    __tablename__ = "stock_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)

    history: Mapped[list["StockHistory"]] = relationship(
        "StockHistory",
        back_populates="item",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<StockItem(id='{self.id}', name='{self.name}')>"
