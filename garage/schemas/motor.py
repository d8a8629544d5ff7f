"""Schémas Moto / Motor schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from garage.models.motor import MotorStatus, PayerTag
from garage.services.ledger import compute_profit, compute_status, compute_total_investment


class MotorBase(BaseModel):
    car_plate: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=150)
    year: int | None = Field(default=None, ge=1900, le=2100)
    previous_owner: str | None = None
    changed_name: bool = False
    paid_by: PayerTag | None = None
    clear: bool = False
    bought_in_date: date | None = None
    listing_date: date | None = None
    sold_date: date | None = None
    bought_in_cost: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    sold_price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class MotorCreate(MotorBase):
    pass


class MotorUpdate(BaseModel):
    """restore_cost et medias exclus : maintenus par le ledger / excluded: ledger-maintained."""
    car_plate: str | None = Field(default=None, min_length=1, max_length=20)
    name: str | None = Field(default=None, min_length=1, max_length=150)
    year: int | None = Field(default=None, ge=1900, le=2100)
    previous_owner: str | None = None
    changed_name: bool | None = None
    paid_by: PayerTag | None = None
    clear: bool | None = None
    bought_in_date: date | None = None
    listing_date: date | None = None
    sold_date: date | None = None
    bought_in_cost: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    sold_price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)

    @field_validator("car_plate", "name", "changed_name", "clear")
    @classmethod
    def not_null(cls, value):
        # Omis = inchange ; null explicite refuse / Omitted means unchanged, explicit null is rejected
        if value is None:
            raise ValueError("must not be null")
        return value


class LifecycleUpdate(BaseModel):
    """Editeur de statut / Status editor."""
    status: MotorStatus
    listing_date: date | None = None
    sold_date: date | None = None
    sold_price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class PrimaryImageUpdate(BaseModel):
    index: int


class MotorRead(MotorBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    restore_cost: Decimal
    images: list[str]
    videos: list[str]
    primary_image_index: int | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def status(self) -> MotorStatus:
        return compute_status(self)

    @computed_field
    @property
    def total_investment(self) -> Decimal:
        return compute_total_investment(self)

    @computed_field
    @property
    def profit(self) -> Decimal:
        return compute_profit(self)


class MediaUploadRead(BaseModel):
    url: str
    public_id: str
    kind: str
    motor: MotorRead
