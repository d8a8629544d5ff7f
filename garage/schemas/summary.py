"""Schéma synthèse / Portfolio summary schema."""

from decimal import Decimal

from pydantic import BaseModel


class PortfolioSummaryRead(BaseModel):
    total_motors: int
    in_progress: int
    listed: int
    sold: int
    total_holding_cost: Decimal
    total_revenue: Decimal
    total_profit: Decimal
    avg_profit_per_sale: Decimal

    model_config = {"from_attributes": True}
