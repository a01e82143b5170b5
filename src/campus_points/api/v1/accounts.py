"""Account balance endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...schemas import AccountBalance
from ...services import ledger_service

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/{account_id}/balance", response_model=AccountBalance, summary="Current points balance")
def get_balance(account_id: int, db: Session = Depends(get_db)) -> AccountBalance:
    account = ledger_service.get_account(db, account_id)
    return AccountBalance(
        account_id=account.id,
        utorid=account.utorid,
        points=account.points,
        verified=account.verified,
    )
