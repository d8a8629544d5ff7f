"""Tests du moteur de comptabilite sur base SQLite / Ledger engine tests against SQLite."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from garage.errors import NotFoundError, ValidationError
from garage.models.motor import Motor, PayerTag
from garage.models.restore_cost import RestoreCost
from garage.services.ledger import LedgerService


def cost(amount: str, paid_by: PayerTag = PayerTag.DH, **extra) -> dict:
    fields = {
        "description": "Carburettor rebuild",
        "amount": Decimal(amount),
        "paid_by": paid_by,
        "date": date(2024, 3, 1),
    }
    fields.update(extra)
    return fields


async def make_motor(db, **kwargs) -> Motor:
    fields = {"car_plate": "WXY 1234", "name": "Honda EX5", "restore_cost": Decimal("0")}
    fields.update(kwargs)
    motor = Motor(**fields)
    db.add(motor)
    await db.flush()
    await db.refresh(motor)
    return motor


async def entries_sum(db, motor_id: int) -> Decimal:
    total = await db.scalar(
        select(func.coalesce(func.sum(RestoreCost.amount), 0)).where(RestoreCost.motor_id == motor_id)
    )
    return Decimal(str(total)).quantize(Decimal("0.01"))


@pytest.mark.asyncio
async def test_add_two_costs(db):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    assert motor.restore_cost == Decimal("0")

    await ledger.add_cost_entry(motor.id, cost("150.00", PayerTag.DH))
    assert motor.restore_cost == Decimal("150.00")

    await ledger.add_cost_entry(motor.id, cost("75.50", PayerTag.KS))
    assert motor.restore_cost == Decimal("225.50")
    assert motor.restore_cost == await entries_sum(db, motor.id)


@pytest.mark.asyncio
async def test_delete_recomputes_from_remaining_entries(db):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    first = await ledger.add_cost_entry(motor.id, cost("150.00"))
    await ledger.add_cost_entry(motor.id, cost("75.50", PayerTag.KS))

    total = await ledger.delete_cost_entry(first.id)
    assert total == Decimal("75.50")
    assert motor.restore_cost == Decimal("75.50")


@pytest.mark.asyncio
async def test_delete_repairs_drift(db):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    first = await ledger.add_cost_entry(motor.id, cost("150.00"))
    await ledger.add_cost_entry(motor.id, cost("75.50"))
    motor.restore_cost = Decimal("999.99")
    await db.flush()

    await ledger.delete_cost_entry(first.id)
    assert motor.restore_cost == Decimal("75.50")


@pytest.mark.asyncio
async def test_add_then_delete_restores_previous_aggregate(db):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    await ledger.add_cost_entry(motor.id, cost("42.10"))
    before = motor.restore_cost

    entry = await ledger.add_cost_entry(motor.id, cost("19.99"))
    assert motor.restore_cost == Decimal("62.09")
    await ledger.delete_cost_entry(entry.id)
    assert motor.restore_cost == before


@pytest.mark.asyncio
async def test_aggregate_is_per_motor(db):
    ledger = LedgerService(db)
    m1 = await make_motor(db)
    m2 = await make_motor(db, car_plate="JKL 9")
    await ledger.add_cost_entry(m1.id, cost("100.00"))
    await ledger.add_cost_entry(m2.id, cost("30.00"))
    assert m1.restore_cost == Decimal("100.00")
    assert m2.restore_cost == Decimal("30.00")


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0", "-5.00"])
async def test_add_rejects_non_positive_amount(db, amount):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    with pytest.raises(ValidationError):
        await ledger.add_cost_entry(motor.id, cost(amount))
    assert await ledger.list_cost_entries(motor.id) == []


@pytest.mark.asyncio
async def test_add_rejects_blank_description(db):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    with pytest.raises(ValidationError):
        await ledger.add_cost_entry(motor.id, cost("10.00", description="   "))


@pytest.mark.asyncio
async def test_add_to_missing_motor(db):
    with pytest.raises(NotFoundError):
        await LedgerService(db).add_cost_entry(404, cost("10.00"))


@pytest.mark.asyncio
async def test_update_amount_recomputes_aggregate(db):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    entry = await ledger.add_cost_entry(motor.id, cost("150.00"))
    await ledger.add_cost_entry(motor.id, cost("75.50"))

    updated = await ledger.update_cost_entry(entry.id, {"amount": Decimal("200.00")})
    assert updated.amount == Decimal("200.00")
    await db.refresh(motor)
    assert motor.restore_cost == Decimal("275.50")


@pytest.mark.asyncio
async def test_update_other_fields_keeps_aggregate(db):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    entry = await ledger.add_cost_entry(motor.id, cost("150.00"))

    updated = await ledger.update_cost_entry(
        entry.id, {"description": "Chain and sprocket", "paid_by": PayerTag.ZC, "motor_id": 999}
    )
    assert updated.description == "Chain and sprocket"
    assert updated.paid_by is PayerTag.ZC
    assert updated.motor_id == motor.id
    await db.refresh(motor)
    assert motor.restore_cost == Decimal("150.00")


@pytest.mark.asyncio
async def test_update_rejects_non_positive_amount(db):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    entry = await ledger.add_cost_entry(motor.id, cost("150.00"))
    with pytest.raises(ValidationError):
        await ledger.update_cost_entry(entry.id, {"amount": Decimal("0")})


@pytest.mark.asyncio
async def test_missing_cost_entry(db):
    ledger = LedgerService(db)
    with pytest.raises(NotFoundError):
        await ledger.delete_cost_entry(12345)
    with pytest.raises(NotFoundError):
        await ledger.update_cost_entry(12345, {"description": "x"})


@pytest.mark.asyncio
async def test_clear_all_payments(db):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    other = await make_motor(db, car_plate="OTHER 1")
    await ledger.add_cost_entry(motor.id, cost("150.00"))
    await ledger.add_cost_entry(motor.id, cost("75.50"))
    await ledger.add_cost_entry(other.id, cost("10.00"))

    cleared = await ledger.clear_all_payments(motor.id)
    assert cleared == 2
    assert all(e.payment_clear for e in await ledger.list_cost_entries(motor.id))
    assert not any(e.payment_clear for e in await ledger.list_cost_entries(other.id))
    refreshed = await ledger.get_motor(motor.id)
    assert refreshed.restore_cost == Decimal("225.50")


@pytest.mark.asyncio
async def test_clear_all_payments_without_entries(db):
    ledger = LedgerService(db)
    motor = await make_motor(db)
    assert await ledger.clear_all_payments(motor.id) == 0


@pytest.mark.asyncio
async def test_delete_motor_removes_costs(session_factory):
    async with session_factory() as db:
        ledger = LedgerService(db)
        motor = await make_motor(db)
        e1 = await ledger.add_cost_entry(motor.id, cost("150.00"))
        e2 = await ledger.add_cost_entry(motor.id, cost("75.50"))
        await db.commit()
        motor_id, entry_ids = motor.id, [e1.id, e2.id]

    async with session_factory() as db:
        await LedgerService(db).delete_motor(motor_id)
        await db.commit()

    async with session_factory() as db:
        ledger = LedgerService(db)
        with pytest.raises(NotFoundError):
            await ledger.get_motor(motor_id)
        for entry_id in entry_ids:
            with pytest.raises(NotFoundError):
                await ledger.get_cost_entry(entry_id)


@pytest.mark.asyncio
async def test_delete_motor_is_all_or_nothing(session_factory):
    async with session_factory() as db:
        ledger = LedgerService(db)
        motor = await make_motor(db)
        await ledger.add_cost_entry(motor.id, cost("150.00"))
        await ledger.add_cost_entry(motor.id, cost("75.50"))
        await db.commit()
        motor_id = motor.id

    async with session_factory() as db:
        await LedgerService(db).delete_motor(motor_id)
        await db.rollback()

    async with session_factory() as db:
        ledger = LedgerService(db)
        motor = await ledger.get_motor(motor_id)
        assert len(await ledger.list_cost_entries(motor_id)) == 2
        assert motor.restore_cost == Decimal("225.50")


@pytest.mark.asyncio
async def test_delete_missing_motor(db):
    with pytest.raises(NotFoundError):
        await LedgerService(db).delete_motor(404)


@pytest.mark.asyncio
async def test_reconcile_all(db):
    ledger = LedgerService(db)
    m1 = await make_motor(db)
    m2 = await make_motor(db, car_plate="JKL 9")
    await ledger.add_cost_entry(m1.id, cost("40.00"))
    await ledger.add_cost_entry(m2.id, cost("60.00"))
    m1.restore_cost = Decimal("1.00")
    await db.flush()

    assert await ledger.reconcile_all() == 1
    assert (await ledger.get_motor(m1.id)).restore_cost == Decimal("40.00")


class TestImages:
    """Image principale / Primary image bookkeeping."""

    IMAGES = ["https://cdn/a.jpg", "https://cdn/b.jpg", "https://cdn/c.jpg"]

    @pytest.mark.asyncio
    async def test_remove_primary_resets_to_first(self, db):
        motor = await make_motor(db, images=list(self.IMAGES), primary_image_index=1)
        motor = await LedgerService(db).remove_image(motor.id, "https://cdn/b.jpg")
        assert motor.images == ["https://cdn/a.jpg", "https://cdn/c.jpg"]
        assert motor.primary_image_index == 0

    @pytest.mark.asyncio
    async def test_remove_before_primary_shifts_index(self, db):
        motor = await make_motor(db, images=list(self.IMAGES), primary_image_index=2)
        motor = await LedgerService(db).remove_image(motor.id, "https://cdn/a.jpg")
        assert motor.primary_image_index == 1
        assert motor.images[motor.primary_image_index] == "https://cdn/c.jpg"

    @pytest.mark.asyncio
    async def test_remove_after_primary_keeps_index(self, db):
        motor = await make_motor(db, images=list(self.IMAGES), primary_image_index=0)
        motor = await LedgerService(db).remove_image(motor.id, "https://cdn/c.jpg")
        assert motor.primary_image_index == 0

    @pytest.mark.asyncio
    async def test_remove_last_image_clears_primary(self, db):
        motor = await make_motor(db, images=["https://cdn/a.jpg"], primary_image_index=0)
        motor = await LedgerService(db).remove_image(motor.id, "https://cdn/a.jpg")
        assert motor.images == []
        assert motor.primary_image_index is None

    @pytest.mark.asyncio
    async def test_remove_unknown_url_is_a_no_op(self, db):
        motor = await make_motor(db, images=list(self.IMAGES), primary_image_index=2)
        motor = await LedgerService(db).remove_image(motor.id, "https://cdn/zzz.jpg")
        assert motor.images == self.IMAGES
        assert motor.primary_image_index == 2

    @pytest.mark.asyncio
    async def test_remove_from_missing_motor(self, db):
        with pytest.raises(NotFoundError):
            await LedgerService(db).remove_image(404, "https://cdn/a.jpg")

    @pytest.mark.asyncio
    async def test_set_primary_image(self, db):
        motor = await make_motor(db, images=list(self.IMAGES))
        motor = await LedgerService(db).set_primary_image(motor.id, 2)
        assert motor.primary_image_index == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("index", [-1, 3])
    async def test_set_primary_image_out_of_range(self, db, index):
        motor = await make_motor(db, images=list(self.IMAGES))
        with pytest.raises(ValidationError):
            await LedgerService(db).set_primary_image(motor.id, index)

    @pytest.mark.asyncio
    async def test_attach_first_image_becomes_primary(self, db):
        motor = await make_motor(db, images=[])
        motor = await LedgerService(db).attach_media(motor.id, "https://cdn/new.jpg", "image")
        assert motor.images == ["https://cdn/new.jpg"]
        assert motor.primary_image_index == 0

    @pytest.mark.asyncio
    async def test_videos(self, db):
        ledger = LedgerService(db)
        motor = await make_motor(db, videos=[])
        await ledger.attach_media(motor.id, "https://cdn/v1.mp4", "video")
        motor = await ledger.attach_media(motor.id, "https://cdn/v2.mp4", "video")
        assert motor.videos == ["https://cdn/v1.mp4", "https://cdn/v2.mp4"]
        assert motor.images == []

        motor = await ledger.remove_video(motor.id, "https://cdn/v1.mp4")
        assert motor.videos == ["https://cdn/v2.mp4"]
        motor = await ledger.remove_video(motor.id, "https://cdn/v1.mp4")
        assert motor.videos == ["https://cdn/v2.mp4"]
