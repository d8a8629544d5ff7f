"""Routes API / API routes."""

from fastapi import APIRouter

from garage.api import (
    auth,
    costs,
    inventory,
    motors,
    summary,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(motors.router, prefix="/motors", tags=["motors"])
api_router.include_router(costs.router, tags=["costs"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(summary.router, prefix="/summary", tags=["summary"])
