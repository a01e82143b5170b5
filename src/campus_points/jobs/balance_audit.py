"""Background scheduler for ledger/balance consistency audits."""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from sqlalchemy.orm import sessionmaker

from ..core.config import get_settings
from ..core.database import SessionLocal, session_scope
from ..core.rate_limiter import get_rate_limiter
from ..services.ledger_service import audit_balances

logger = logging.getLogger(__name__)

_scheduler = AsyncIOScheduler(timezone="UTC")


async def _execute_balance_audit() -> None:
    session = SessionLocal()
    try:
        drift = audit_balances(session)
        if drift:
            logger.warning("balance audit found %d drifting accounts", len(drift))
        else:
            logger.info("balance audit completed: no drift")
    except Exception:  # pragma: no cover - safeguard for background job
        logger.exception("balance audit job failed")
        raise
    finally:
        session.rollback()
        session.close()


async def _purge_rate_limits() -> None:
    removed = get_rate_limiter().purge()
    if removed:
        logger.debug("purged %d expired rate-limit windows", removed)


def register_scheduler(app: FastAPI) -> None:
    """Attach APScheduler lifecycle hooks to the FastAPI app."""

    @app.on_event("startup")
    async def start_scheduler() -> None:
        if not _scheduler.running:
            _scheduler.add_job(
                _execute_balance_audit,
                "interval",
                minutes=get_settings().balance_audit_interval_minutes,
                id="balance_audit",
                replace_existing=True,
                misfire_grace_time=600,
            )
            _scheduler.add_job(
                _purge_rate_limits,
                "interval",
                minutes=5,
                id="rate_limit_purge",
                replace_existing=True,
            )
            _scheduler.start()
            logger.info("balance audit scheduler started")

    @app.on_event("shutdown")
    async def shutdown_scheduler() -> None:
        if _scheduler.running:
            _scheduler.shutdown(wait=False)
            logger.info("balance audit scheduler stopped")


def run_audit_once(factory: sessionmaker = SessionLocal) -> list[tuple[int, int, int]]:
    """Convenience helper to run the audit synchronously for manual checks."""

    with session_scope(factory) as session:
        return audit_balances(session)
