"""Route synthèse financière / Portfolio summary route."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garage.database import get_db
from garage.models.motor import Motor
from garage.schemas.summary import PortfolioSummaryRead
from garage.services.auth_gate import SessionContext
from garage.services.ledger import portfolio_summary
from garage.api.deps import require_verified

router = APIRouter()


@router.get("/", response_model=PortfolioSummaryRead)
async def get_summary(
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(require_verified),
):
    """Stock en cours, revenus, bénéfice / Holdings, revenue, profit."""
    motors = (await db.execute(select(Motor))).scalars().all()
    return PortfolioSummaryRead.model_validate(portfolio_summary(motors))
