"""Schémas coûts de restauration / Restore cost schemas."""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from garage.models.motor import PayerTag
from garage.schemas.motor import MotorRead


class RestoreCostCreate(BaseModel):
    description: str = Field(min_length=1)
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    paid_by: PayerTag
    date: dt.date
    payment_clear: bool = False
    receipt: str | None = None


class RestoreCostUpdate(BaseModel):
    """motor_id absent : immuable apres creation / motor_id absent: immutable after creation."""
    description: str | None = Field(default=None, min_length=1)
    amount: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)
    paid_by: PayerTag | None = None
    date: dt.date | None = None
    payment_clear: bool | None = None
    receipt: str | None = None

    @field_validator("description", "amount", "paid_by", "date", "payment_clear")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class RestoreCostRead(BaseModel):
    id: int
    motor_id: int
    description: str
    amount: Decimal
    paid_by: PayerTag
    date: dt.date
    payment_clear: bool
    receipt: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = {"from_attributes": True}


class CostBreakdownRead(BaseModel):
    """Totaux calcules depuis les lignes / Totals computed from the entries."""
    total: Decimal
    outstanding: Decimal
    by_payer: dict[str, Decimal]
    entry_count: int

    model_config = {"from_attributes": True}


class MotorLedgerRead(BaseModel):
    """Vue complete d'une moto / Full ledger view of a motor."""
    motor: MotorRead
    costs: list[RestoreCostRead]
    breakdown: CostBreakdownRead


class ClearPaymentsResponse(BaseModel):
    motor_id: int
    cleared: int
