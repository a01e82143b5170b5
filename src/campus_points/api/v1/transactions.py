"""Purchase, adjustment and suspicious-flag endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...models import TransactionType
from ...schemas import (
    AdjustmentCreate,
    PurchaseCreate,
    PurchaseReceipt,
    SuspiciousUpdate,
    TransactionRead,
)
from ...services import ledger_service, suspicious_service, transaction_service
from ...services.exceptions import LedgerError

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post(
    "/purchases",
    response_model=PurchaseReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Record a purchase",
    responses={
        201: {
            "description": "Purchase recorded",
            "content": {
                "application/json": {
                    "example": {
                        "transaction": {
                            "id": 42,
                            "account_id": 7,
                            "type": "purchase",
                            "amount": 350,
                            "spent": "50.00",
                            "redeemed": None,
                            "related_id": None,
                            "promotion_ids": [3, 5],
                            "suspicious": False,
                            "remark": "",
                            "created_by": "cashier1",
                            "created_at": "2025-11-12T10:15:30",
                        },
                        "earned_points": 350,
                        "applied_promotion_ids": [3, 5],
                    }
                }
            },
        },
        400: {"description": "Business rule violation"},
        404: {"description": "Account or promotion not found"},
    },
)
def create_purchase(
    payload: PurchaseCreate,
    db: Session = Depends(get_db),
) -> PurchaseReceipt:
    """Credit points for a purchase.

    Example request body::

        {
            "account_id": 7,
            "spent": 50,
            "promotion_ids": [3, 5],
            "created_by_id": 2
        }
    """

    try:
        cashier = ledger_service.get_account(db, payload.created_by_id)
        result = transaction_service.create_purchase(
            db,
            account_id=payload.account_id,
            spent=payload.spent,
            promotion_ids=payload.promotion_ids,
            remark=payload.remark,
            created_by=cashier.utorid,
            creator_suspicious=cashier.suspicious,
        )
        db.commit()
        db.refresh(result.transaction)
        return PurchaseReceipt(
            transaction=result.transaction,
            earned_points=result.earned_points,
            applied_promotion_ids=result.applied_promotion_ids,
        )
    except LedgerError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/adjustments",
    response_model=TransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record a manual adjustment",
)
def create_adjustment(
    payload: AdjustmentCreate,
    db: Session = Depends(get_db),
) -> TransactionRead:
    try:
        manager = ledger_service.get_account(db, payload.created_by_id)
        transaction = transaction_service.create_adjustment(
            db,
            account_id=payload.account_id,
            amount=payload.amount,
            related_transaction_id=payload.related_transaction_id,
            remark=payload.remark,
            created_by=manager.utorid,
            creator_role=manager.role,
            promotion_ids=payload.promotion_ids,
        )
        db.commit()
        db.refresh(transaction)
        return transaction
    except LedgerError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("", response_model=List[TransactionRead], summary="List transactions")
def list_transactions(
    *,
    account_id: Optional[int] = Query(None, description="Filter by owning account"),
    type: Optional[TransactionType] = Query(None, description="Filter by transaction type"),
    suspicious: Optional[bool] = Query(None),
    related_id: Optional[int] = Query(None),
    promotion_id: Optional[int] = Query(None),
    amount: Optional[int] = Query(None),
    operator: Optional[str] = Query(None, pattern="^(gte|lte)$"),
    limit: int = Query(50, ge=1, le=100, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    db: Session = Depends(get_db),
) -> List[TransactionRead]:
    """Fetch ledger entries, newest first."""

    transactions = ledger_service.list_transactions(
        db,
        account_id=account_id,
        type=type,
        suspicious=suspicious,
        related_id=related_id,
        promotion_id=promotion_id,
        amount=amount,
        operator=operator,
        limit=limit,
        offset=offset,
    )
    return list(transactions)


@router.get("/{transaction_id}", response_model=TransactionRead, summary="Fetch one transaction")
def get_transaction(transaction_id: int, db: Session = Depends(get_db)) -> TransactionRead:
    return ledger_service.get_transaction(db, transaction_id)


@router.patch(
    "/{transaction_id}/suspicious",
    response_model=TransactionRead,
    summary="Flag or clear a suspicious transaction",
)
def update_suspicious(
    transaction_id: int,
    payload: SuspiciousUpdate,
    db: Session = Depends(get_db),
) -> TransactionRead:
    """Freeze or release the transaction's points on its owner's balance."""

    try:
        transaction = suspicious_service.set_suspicious(
            db,
            transaction_id=transaction_id,
            value=payload.suspicious,
        )
        db.commit()
        db.refresh(transaction)
        return transaction
    except LedgerError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
