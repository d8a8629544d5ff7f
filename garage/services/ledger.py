"""
Moteur de comptabilite des motos / Motor ledger engine.

Calculs derives (statut, investissement, benefice) et maintenance de l'agregat
Motor.restore_cost. Chaque mutation d'un cout recalcule la somme complete des
lignes restantes, dans la transaction de la session appelante.
Derived figures (status, investment, profit) and upkeep of the Motor.restore_cost
aggregate. Every cost mutation recomputes the full sum of the remaining entries,
inside the caller's session transaction.
"""

import datetime as dt
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from garage.errors import NotFoundError, ValidationError
from garage.models.motor import Motor, MotorStatus
from garage.models.restore_cost import RestoreCost

log = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Champs modifiables d'une ligne de cout / Editable fields of a cost entry
COST_FIELDS = {"description", "amount", "paid_by", "date", "payment_clear", "receipt"}


def _money(value: Any) -> Decimal:
    """Normaliser en Decimal a 2 decimales / Normalize to a 2-place Decimal."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT)


# ─── Calculs purs / Pure derivations ───

def compute_status(motor) -> MotorStatus:
    """Vendu prime sur en vente / Sold takes precedence over listed."""
    if motor.sold_date is not None:
        return MotorStatus.SOLD
    if motor.listing_date is not None:
        return MotorStatus.LISTED
    return MotorStatus.IN_PROGRESS


def compute_total_investment(motor) -> Decimal:
    """Prix d'achat + restauration / Purchase cost plus restoration."""
    return _money(motor.bought_in_cost) + _money(motor.restore_cost)


def compute_profit(motor) -> Decimal:
    """Benefice, negatif en cas de perte ; 0 tant que le prix de vente manque.

    Profit, negative for a loss; 0 while the sale price is unset.
    """
    if motor.sold_price is None:
        return ZERO
    return _money(motor.sold_price) - compute_total_investment(motor)


@dataclass
class CostBreakdown:
    """Totaux d'un ensemble de lignes / Totals over a set of cost entries."""
    total: Decimal = ZERO
    outstanding: Decimal = ZERO
    by_payer: dict[str, Decimal] = field(default_factory=dict)
    entry_count: int = 0


def summarize_costs(entries: Iterable[RestoreCost]) -> CostBreakdown:
    """Total, reste a regler et repartition par payeur / Total, unpaid and per-payer split."""
    by_payer: dict[str, Decimal] = defaultdict(lambda: ZERO)
    breakdown = CostBreakdown()
    for entry in entries:
        amount = _money(entry.amount)
        breakdown.total += amount
        breakdown.entry_count += 1
        if not entry.payment_clear:
            breakdown.outstanding += amount
        by_payer[entry.paid_by.value] += amount
    breakdown.by_payer = dict(by_payer)
    return breakdown


@dataclass
class PortfolioSummary:
    total_motors: int = 0
    in_progress: int = 0
    listed: int = 0
    sold: int = 0
    total_holding_cost: Decimal = ZERO
    total_revenue: Decimal = ZERO
    total_profit: Decimal = ZERO
    avg_profit_per_sale: Decimal = ZERO


def portfolio_summary(motors: Iterable[Motor]) -> PortfolioSummary:
    """Synthese financiere du parc / Financial overview of all motors.

    Le stock en cours compte l'investissement des motos non vendues ; le benefice
    vaut revenus moins investissement des motos vendues, donc une vente sans prix
    compte comme une perte de tout son investissement.
    Holdings count the investment of unsold motors; profit is revenue minus the
    investment of sold motors, so a sale without a price loses its whole investment.
    """
    summary = PortfolioSummary()
    for motor in motors:
        summary.total_motors += 1
        status = compute_status(motor)
        if status is MotorStatus.SOLD:
            summary.sold += 1
            summary.total_revenue += _money(motor.sold_price)
            summary.total_profit += _money(motor.sold_price) - compute_total_investment(motor)
        else:
            if status is MotorStatus.LISTED:
                summary.listed += 1
            else:
                summary.in_progress += 1
            summary.total_holding_cost += compute_total_investment(motor)
    if summary.sold:
        summary.avg_profit_per_sale = (summary.total_profit / summary.sold).quantize(CENT)
    return summary


def apply_lifecycle(
    motor: Motor,
    status: MotorStatus,
    listing_date: dt.date | None = None,
    sold_date: dt.date | None = None,
    sold_price: Decimal | None = None,
) -> None:
    """Appliquer un statut cible en ajustant les dates / Move a motor to a target status.

    IN_PROGRESS efface annonce et vente, LISTED efface la vente, SOLD conserve ou
    remplace les deux. Vendre sans annonce prealable est permis.
    """
    if status is MotorStatus.IN_PROGRESS:
        motor.listing_date = None
        motor.sold_date = None
        motor.sold_price = None
        return

    if listing_date is not None:
        motor.listing_date = listing_date

    if status is MotorStatus.LISTED:
        if motor.listing_date is None:
            raise ValidationError("A listing date is required to mark a motor as listed")
        motor.sold_date = None
        motor.sold_price = None
        return

    if sold_date is not None:
        motor.sold_date = sold_date
    if sold_price is not None:
        motor.sold_price = sold_price
    if motor.sold_date is None:
        raise ValidationError("A sold date is required to mark a motor as sold")


def _check_cost_fields(fields: dict) -> None:
    if "amount" in fields:
        amount = fields["amount"]
        if amount is None or _money(amount) <= 0:
            raise ValidationError("Cost amount must be greater than zero")
    if "description" in fields:
        description = fields["description"]
        if description is None or not description.strip():
            raise ValidationError("Cost description must not be empty")
    for key in ("paid_by", "date"):
        if key in fields and fields[key] is None:
            raise ValidationError(f"Cost {key} is required")


class LedgerService:
    """Operations qui modifient les couts et l'agregat / Operations mutating costs and the aggregate.

    Aucun commit ici : la session (get_db) valide ou annule tout d'un bloc.
    No commit here: the session (get_db) commits or rolls back everything at once.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- Lecture / Reads ---

    async def get_motor(self, motor_id: int, *, lock: bool = False) -> Motor:
        """Charger une moto ou lever NotFoundError / Load a motor or raise NotFoundError.

        lock=True verrouille la ligne (SELECT ... FOR UPDATE) pour serialiser les
        mises a jour concurrentes de l'agregat ; sans effet sous SQLite.
        """
        query = select(Motor).where(Motor.id == motor_id)
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        motor = (await self.db.execute(query)).scalar_one_or_none()
        if motor is None:
            raise NotFoundError(f"Motor {motor_id} not found")
        return motor

    async def get_cost_entry(self, entry_id: int) -> RestoreCost:
        entry = await self.db.get(RestoreCost, entry_id)
        if entry is None:
            raise NotFoundError(f"Cost entry {entry_id} not found")
        return entry

    async def list_cost_entries(self, motor_id: int) -> list[RestoreCost]:
        """Lignes d'une moto, plus recentes d'abord / A motor's entries, newest first."""
        result = await self.db.execute(
            select(RestoreCost)
            .where(RestoreCost.motor_id == motor_id)
            .order_by(RestoreCost.date.desc(), RestoreCost.id.desc())
        )
        return list(result.scalars().all())

    # --- Agregat / Aggregate ---

    async def recompute_restore_cost(self, motor: Motor) -> Decimal:
        """Reecrire restore_cost = somme exacte des lignes / Rewrite restore_cost as the exact sum."""
        await self.db.flush()
        total = await self.db.scalar(
            select(func.coalesce(func.sum(RestoreCost.amount), 0)).where(
                RestoreCost.motor_id == motor.id
            )
        )
        motor.restore_cost = _money(total)
        await self.db.flush()
        await self.db.refresh(motor)
        return motor.restore_cost

    async def reconcile_all(self) -> int:
        """Corriger toute derive de l'agregat / Repair aggregate drift on every motor.

        Retourne le nombre de motos corrigees / Returns how many motors were corrected.
        """
        corrected = 0
        motors = (await self.db.execute(select(Motor).with_for_update())).scalars().all()
        for motor in motors:
            before = _money(motor.restore_cost)
            after = await self.recompute_restore_cost(motor)
            if before != after:
                corrected += 1
                log.warning("Motor %s restore_cost drift corrected: %s -> %s", motor.id, before, after)
        return corrected

    # --- Couts / Cost entries ---

    async def add_cost_entry(self, motor_id: int, fields: dict) -> RestoreCost:
        """Ajouter une ligne puis recalculer l'agregat / Add an entry then recompute the aggregate."""
        fields = {k: v for k, v in fields.items() if k in COST_FIELDS}
        for key in ("description", "amount", "paid_by", "date"):
            if key not in fields:
                raise ValidationError(f"Cost {key} is required")
        _check_cost_fields(fields)
        motor = await self.get_motor(motor_id, lock=True)

        entry = RestoreCost(motor_id=motor.id, **fields)
        self.db.add(entry)
        total = await self.recompute_restore_cost(motor)
        await self.db.refresh(entry)
        log.info("Cost entry %s added to motor %s, restore_cost=%s", entry.id, motor.id, total)
        return entry

    async def update_cost_entry(self, entry_id: int, fields: dict) -> RestoreCost:
        """Modifier une ligne ; un nouveau montant recalcule l'agregat.

        Update an entry; a changed amount recomputes the owning motor's aggregate.
        """
        fields = {k: v for k, v in fields.items() if k in COST_FIELDS}
        _check_cost_fields(fields)
        entry = await self.get_cost_entry(entry_id)
        motor = None
        if "amount" in fields:
            motor = await self.get_motor(entry.motor_id, lock=True)

        for key, value in fields.items():
            setattr(entry, key, value)
        entry.updated_at = func.now()
        if motor is not None:
            total = await self.recompute_restore_cost(motor)
            log.info("Cost entry %s amount changed, motor %s restore_cost=%s", entry.id, motor.id, total)
        else:
            await self.db.flush()
        await self.db.refresh(entry)
        return entry

    async def delete_cost_entry(self, entry_id: int) -> Decimal:
        """Supprimer une ligne puis recalculer depuis les lignes restantes.

        Delete an entry then recompute from the remaining entries (never a subtraction).
        """
        entry = await self.get_cost_entry(entry_id)
        motor = await self.get_motor(entry.motor_id, lock=True)
        await self.db.delete(entry)
        total = await self.recompute_restore_cost(motor)
        log.info("Cost entry %s deleted from motor %s, restore_cost=%s", entry_id, motor.id, total)
        return total

    async def clear_all_payments(self, motor_id: int) -> int:
        """Marquer toutes les lignes comme reglees / Mark every entry of a motor as paid.

        Un seul flush dans la transaction ; sans ligne, rien a faire.
        One flush inside the transaction; nothing to do without entries.
        """
        await self.get_motor(motor_id)
        entries = await self.list_cost_entries(motor_id)
        for entry in entries:
            entry.payment_clear = True
            entry.updated_at = func.now()
        await self.db.flush()
        log.info("Cleared %s payments for motor %s", len(entries), motor_id)
        return len(entries)

    # --- Moto / Motor ---

    async def delete_motor(self, motor_id: int) -> None:
        """Supprimer la moto et toutes ses lignes, tout ou rien / Delete motor and its entries atomically."""
        motor = await self.get_motor(motor_id, lock=True)
        entries = await self.list_cost_entries(motor_id)
        for entry in entries:
            await self.db.delete(entry)
        await self.db.delete(motor)
        await self.db.flush()
        log.info("Motor %s deleted with %s cost entries", motor_id, len(entries))

    # --- Medias / Media bookkeeping ---

    async def attach_media(self, motor_id: int, url: str, kind: str) -> Motor:
        """Ajouter une URL deja hebergee / Append an already-hosted URL."""
        motor = await self.get_motor(motor_id)
        if kind == "video":
            motor.videos = [*motor.videos, url]
        else:
            motor.images = [*motor.images, url]
            if motor.primary_image_index is None:
                motor.primary_image_index = 0
        await self.db.flush()
        await self.db.refresh(motor)
        return motor

    async def remove_image(self, motor_id: int, image_url: str) -> Motor:
        """Retirer une image et recaler l'image principale / Remove an image and fix the primary index."""
        motor = await self.get_motor(motor_id)
        images = list(motor.images)
        if image_url not in images:
            return motor

        removed = images.index(image_url)
        del images[removed]
        primary = motor.primary_image_index
        if primary is not None:
            if removed == primary:
                primary = 0 if images else None
            elif removed < primary:
                primary -= 1
        if not images:
            primary = None

        motor.images = images
        motor.primary_image_index = primary
        await self.db.flush()
        await self.db.refresh(motor)
        return motor

    async def remove_video(self, motor_id: int, video_url: str) -> Motor:
        motor = await self.get_motor(motor_id)
        videos = list(motor.videos)
        if video_url in videos:
            videos.remove(video_url)
            motor.videos = videos
            await self.db.flush()
            await self.db.refresh(motor)
        return motor

    async def set_primary_image(self, motor_id: int, index: int) -> Motor:
        """Choisir l'image principale, index verifie / Pick the primary image, index bounds-checked."""
        motor = await self.get_motor(motor_id)
        if not 0 <= index < len(motor.images):
            raise ValidationError(
                f"Primary image index {index} out of range for {len(motor.images)} image(s)"
            )
        motor.primary_image_index = index
        await self.db.flush()
        await self.db.refresh(motor)
        return motor
