"""Routes coûts de restauration / Restore cost API routes."""

from fastapi import APIRouter, Depends

from garage.schemas.restore_cost import (
    ClearPaymentsResponse,
    RestoreCostCreate,
    RestoreCostRead,
    RestoreCostUpdate,
)
from garage.services.auth_gate import SessionContext
from garage.services.ledger import LedgerService
from garage.api.deps import get_ledger, require_verified

router = APIRouter()


@router.get("/motors/{motor_id}/costs", response_model=list[RestoreCostRead])
async def list_costs(
    motor_id: int,
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    """Coûts d'une moto, par date décroissante / A motor's costs, newest date first."""
    await ledger.get_motor(motor_id)
    return await ledger.list_cost_entries(motor_id)


@router.post("/motors/{motor_id}/costs", response_model=RestoreCostRead, status_code=201)
async def create_cost(
    motor_id: int,
    data: RestoreCostCreate,
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    return await ledger.add_cost_entry(motor_id, data.model_dump())


@router.post("/motors/{motor_id}/costs/clear-payments", response_model=ClearPaymentsResponse)
async def clear_payments(
    motor_id: int,
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    """Tout marquer comme réglé / Mark every cost as paid."""
    cleared = await ledger.clear_all_payments(motor_id)
    return ClearPaymentsResponse(motor_id=motor_id, cleared=cleared)


@router.put("/costs/{entry_id}", response_model=RestoreCostRead)
async def update_cost(
    entry_id: int,
    data: RestoreCostUpdate,
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    return await ledger.update_cost_entry(entry_id, data.model_dump(exclude_unset=True))


@router.delete("/costs/{entry_id}", status_code=204)
async def delete_cost(
    entry_id: int,
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    await ledger.delete_cost_entry(entry_id)
