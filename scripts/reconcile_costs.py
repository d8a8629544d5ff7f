"""
Reconciliation des couts de restauration / Restore cost reconciliation.

Recalcule Motor.restore_cost depuis les lignes pour toutes les motos.
Recomputes Motor.restore_cost from the entries for every motor.

Usage:
    python -m scripts.reconcile_costs
"""

import asyncio
import sys

from garage.database import async_session, init_db
from garage.services.ledger import LedgerService


async def run() -> int:
    await init_db()
    async with async_session() as session:
        corrected = await LedgerService(session).reconcile_all()
        await session.commit()
    print(f"[reconcile] {corrected} motor(s) corrected")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run()))
