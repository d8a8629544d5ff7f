"""Modele stock de pieces / Parts inventory model."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Enum, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from garage.database import Base
from garage.models.motor import PayerTag


class InventoryItem(Base):
    """Ligne de stock partagee, sans lien avec une moto / Shared stock line, not tied to a motor."""
    __tablename__ = "inventory"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    paid_by: Mapped[PayerTag | None] = mapped_column(Enum(PayerTag))
    payment_clear: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<InventoryItem {self.name} x{self.quantity}>"
