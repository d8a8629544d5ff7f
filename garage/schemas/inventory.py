"""Schémas stock / Inventory schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from garage.models.motor import PayerTag


def _strip_name(value: str | None) -> str | None:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("name must not be empty")
    return value


class InventoryItemCreate(BaseModel):
    name: str = Field(max_length=150)
    quantity: int = Field(default=0, ge=0)
    cost: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    paid_by: PayerTag | None = None
    payment_clear: bool = False

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str | None) -> str | None:
        return _strip_name(value)


class InventoryItemUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=150)
    quantity: int | None = Field(default=None, ge=0)
    cost: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    paid_by: PayerTag | None = None
    payment_clear: bool | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str | None) -> str | None:
        if value is None:
            raise ValueError("name must not be null")
        return _strip_name(value)

    @field_validator("quantity", "payment_clear")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class InventoryItemRead(BaseModel):
    id: int
    name: str
    quantity: int
    cost: Decimal | None = None
    paid_by: PayerTag | None = None
    payment_clear: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class InventoryStats(BaseModel):
    item_count: int
    total_quantity: int
