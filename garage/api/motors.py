"""Routes Motos / Motor API routes."""

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garage.database import get_db
from garage.errors import ValidationError
from garage.models.motor import Motor, MotorStatus
from garage.schemas.motor import (
    LifecycleUpdate,
    MediaUploadRead,
    MotorCreate,
    MotorRead,
    MotorUpdate,
    PrimaryImageUpdate,
)
from garage.schemas.restore_cost import CostBreakdownRead, MotorLedgerRead, RestoreCostRead
from garage.services.auth_gate import SessionContext
from garage.services.ledger import LedgerService, apply_lifecycle, summarize_costs
from garage.services.media_host import MediaHost, get_media_host
from garage.api.deps import get_ledger, require_verified

router = APIRouter()


@router.get("/", response_model=list[MotorRead])
async def list_motors(
    status: MotorStatus | None = None,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(require_verified),
):
    """Lister les motos, plus récentes d'abord / List motors, newest first."""
    query = select(Motor).order_by(Motor.created_at.desc(), Motor.id.desc())
    if status is MotorStatus.SOLD:
        query = query.where(Motor.sold_date.is_not(None))
    elif status is MotorStatus.LISTED:
        query = query.where(Motor.sold_date.is_(None), Motor.listing_date.is_not(None))
    elif status is MotorStatus.IN_PROGRESS:
        query = query.where(Motor.sold_date.is_(None), Motor.listing_date.is_(None))
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{motor_id}", response_model=MotorRead)
async def get_motor(
    motor_id: int,
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    """Voir une moto / Get motor detail."""
    return await ledger.get_motor(motor_id)


@router.get("/{motor_id}/ledger", response_model=MotorLedgerRead)
async def get_motor_ledger(
    motor_id: int,
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    """Moto + lignes de coût + totaux / Motor with cost entries and totals."""
    motor = await ledger.get_motor(motor_id)
    costs = await ledger.list_cost_entries(motor_id)
    breakdown = summarize_costs(costs)
    return MotorLedgerRead(
        motor=MotorRead.model_validate(motor),
        costs=[RestoreCostRead.model_validate(c) for c in costs],
        breakdown=CostBreakdownRead.model_validate(breakdown),
    )


@router.post("/", response_model=MotorRead, status_code=201)
async def create_motor(
    data: MotorCreate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(require_verified),
):
    """Créer une moto / Create motor."""
    motor = Motor(**data.model_dump(), restore_cost=0, images=[], videos=[])
    db.add(motor)
    await db.flush()
    await db.refresh(motor)
    return motor


@router.put("/{motor_id}", response_model=MotorRead)
async def update_motor(
    motor_id: int,
    data: MotorUpdate,
    db: AsyncSession = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    """Modifier une moto / Update motor."""
    motor = await ledger.get_motor(motor_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(motor, key, value)
    await db.flush()
    await db.refresh(motor)
    return motor


@router.put("/{motor_id}/status", response_model=MotorRead)
async def update_motor_status(
    motor_id: int,
    data: LifecycleUpdate,
    db: AsyncSession = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    """Changer le statut (dates ajustées) / Change status, adjusting dates."""
    motor = await ledger.get_motor(motor_id)
    apply_lifecycle(motor, data.status, data.listing_date, data.sold_date, data.sold_price)
    await db.flush()
    await db.refresh(motor)
    return motor


@router.delete("/{motor_id}", status_code=204)
async def delete_motor(
    motor_id: int,
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    """Supprimer une moto et ses coûts / Delete motor with its costs."""
    await ledger.delete_motor(motor_id)


# ─── Médias / Media ───

@router.post("/{motor_id}/media", response_model=MediaUploadRead, status_code=201)
async def upload_media(
    motor_id: int,
    file: UploadFile = File(...),
    ledger: LedgerService = Depends(get_ledger),
    media_host: MediaHost = Depends(get_media_host),
    session: SessionContext = Depends(require_verified),
):
    """Envoyer une image ou vidéo / Upload an image or video.

    L'URL n'est ajoutée qu'après un envoi réussi / The URL is appended only after a successful upload.
    """
    await ledger.get_motor(motor_id)
    payload = await file.read()
    if not payload:
        raise ValidationError("No file provided")
    uploaded = await media_host.upload(payload, file.filename, file.content_type, motor_id)
    motor = await ledger.attach_media(motor_id, uploaded.url, uploaded.kind)
    return MediaUploadRead(
        url=uploaded.url,
        public_id=uploaded.public_id,
        kind=uploaded.kind,
        motor=MotorRead.model_validate(motor),
    )


@router.delete("/{motor_id}/images", response_model=MotorRead)
async def remove_image(
    motor_id: int,
    url: str = Query(..., min_length=1),
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    return await ledger.remove_image(motor_id, url)


@router.delete("/{motor_id}/videos", response_model=MotorRead)
async def remove_video(
    motor_id: int,
    url: str = Query(..., min_length=1),
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    return await ledger.remove_video(motor_id, url)


@router.put("/{motor_id}/primary-image", response_model=MotorRead)
async def set_primary_image(
    motor_id: int,
    data: PrimaryImageUpdate,
    ledger: LedgerService = Depends(get_ledger),
    session: SessionContext = Depends(require_verified),
):
    """Choisir l'image principale / Pick the primary image."""
    return await ledger.set_primary_image(motor_id, data.index)
