"""Modele cout de restauration / Restore cost model."""

import datetime as dt
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, Enum, ForeignKey, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from garage.database import Base
from garage.models.motor import PayerTag


class RestoreCost(Base):
    """Depense de restauration d'une moto / Itemized restoration expense of a motor."""
    __tablename__ = "restore_costs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    motor_id: Mapped[int] = mapped_column(ForeignKey("motors.id"), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_by: Mapped[PayerTag] = mapped_column(Enum(PayerTag), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    payment_clear: Mapped[bool] = mapped_column(Boolean, default=False)
    receipt: Mapped[str | None] = mapped_column(String(500))

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relations
    motor: Mapped["Motor"] = relationship(back_populates="restore_costs")

    def __repr__(self) -> str:
        return f"<RestoreCost {self.amount} {self.paid_by.value} - motor {self.motor_id}>"
