"""Endpoints for point redemptions."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.rate_limiter import rate_limit
from ...schemas import RedemptionCreate, RedemptionProcess, TransactionRead
from ...services import redemption_service
from ...services.exceptions import AlreadyProcessedError, LedgerError

router = APIRouter(prefix="/redemptions", tags=["redemptions"])


@router.post(
    "",
    response_model=TransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Request a redemption",
    dependencies=[Depends(rate_limit("redemptions"))],
    responses={
        201: {
            "description": "Redemption pending",
            "content": {
                "application/json": {
                    "example": {
                        "id": 88,
                        "account_id": 7,
                        "type": "redemption",
                        "amount": -40,
                        "spent": None,
                        "redeemed": None,
                        "related_id": None,
                        "promotion_ids": None,
                        "suspicious": False,
                        "remark": "coffee",
                        "created_by": "member7",
                        "created_at": "2025-11-12T14:30:00",
                    }
                }
            },
        },
        400: {"description": "Business rule violation"},
        403: {"description": "Account not verified"},
        404: {"description": "Account not found"},
    },
)
def request_redemption(
    payload: RedemptionCreate,
    db: Session = Depends(get_db),
) -> TransactionRead:
    """Reserve points for a redemption a cashier will complete later.

    Example request body::

        {
            "account_id": 7,
            "amount": 40,
            "remark": "coffee"
        }
    """

    try:
        transaction = redemption_service.request_redemption(
            db,
            account_id=payload.account_id,
            amount=payload.amount,
            remark=payload.remark,
        )
        db.commit()
        db.refresh(transaction)
        return transaction
    except LedgerError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.patch(
    "/{transaction_id}/processed",
    response_model=TransactionRead,
    summary="Complete a pending redemption",
    responses={
        409: {
            "description": "Redemption already processed; the body carries its completed state",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Transaction has already been processed",
                        "transaction": {"id": 88, "type": "redemption", "amount": -40, "redeemed": 40, "related_id": 3},
                    }
                }
            },
        },
    },
)
def process_redemption(
    transaction_id: int,
    payload: RedemptionProcess,
    db: Session = Depends(get_db),
) -> TransactionRead:
    if payload.processed is not True:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="processed field must be true")

    try:
        transaction = redemption_service.process_redemption(
            db,
            transaction_id=transaction_id,
            processor_id=payload.processor_id,
        )
        db.commit()
        db.refresh(transaction)
        return transaction
    except AlreadyProcessedError as exc:
        completed = TransactionRead.model_validate(exc.transaction).model_dump(mode="json")
        db.rollback()
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "transaction": completed},
        )
    except LedgerError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/pending", response_model=List[TransactionRead], summary="List unprocessed redemptions")
def list_pending(
    *,
    account_id: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> List[TransactionRead]:
    return list(
        redemption_service.list_pending_redemptions(db, account_id=account_id, limit=limit, offset=offset)
    )
