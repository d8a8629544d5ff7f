"""Modele Moto / Motor model.

Un vehicule suivi de l'achat a la revente, en passant par la restauration.
A vehicle tracked from acquisition through restoration to resale.
"""

import enum
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, DateTime, Enum, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from garage.database import Base


class PayerTag(str, enum.Enum):
    """Associe ayant finance / Party who funded a cost."""
    DH = "dh"
    KS = "ks"
    ZC = "zc"


class MotorStatus(str, enum.Enum):
    """Statut derive, jamais stocke / Derived status, never stored."""
    IN_PROGRESS = "IN_PROGRESS"
    LISTED = "LISTED"
    SOLD = "SOLD"


class Motor(Base):
    """Moto suivie / Tracked motor."""
    __tablename__ = "motors"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # --- Identification ---
    car_plate: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer)
    previous_owner: Mapped[str | None] = mapped_column(String(150))
    changed_name: Mapped[bool] = mapped_column(Boolean, default=False)
    paid_by: Mapped[PayerTag | None] = mapped_column(Enum(PayerTag))
    clear: Mapped[bool] = mapped_column(Boolean, default=False)

    # --- Cycle de vie / Lifecycle dates ---
    bought_in_date: Mapped[date | None] = mapped_column(Date)
    listing_date: Mapped[date | None] = mapped_column(Date)
    sold_date: Mapped[date | None] = mapped_column(Date)

    # --- Finances ---
    bought_in_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    sold_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    # Somme des couts de restauration, maintenue par services.ledger
    # Sum of restore costs, maintained by services.ledger only
    restore_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    # --- Medias ---
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    videos: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    primary_image_index: Mapped[int | None] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relations
    restore_costs: Mapped[list["RestoreCost"]] = relationship(
        back_populates="motor", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Motor {self.car_plate} - {self.name}>"
