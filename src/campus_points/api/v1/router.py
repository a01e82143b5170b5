"""Primary API router definition."""

from fastapi import APIRouter

from . import accounts, events, promotions, redemptions, transactions, transfers

api_router = APIRouter()

api_router.include_router(transactions.router)
api_router.include_router(redemptions.router)
api_router.include_router(transfers.router)
api_router.include_router(events.router)
api_router.include_router(promotions.router)
api_router.include_router(accounts.router)


@api_router.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Basic health probe endpoint."""
    return {"status": "ok"}
