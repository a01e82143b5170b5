"""Member-to-member transfer endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.rate_limiter import rate_limit
from ...schemas import TransferCreate, TransferReceipt
from ...services import transfer_service
from ...services.exceptions import LedgerError

router = APIRouter(prefix="/transfers", tags=["transfers"])


@router.post(
    "",
    response_model=TransferReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Transfer points to another member",
    dependencies=[Depends(rate_limit("transfers"))],
    responses={
        400: {"description": "Business rule violation"},
        403: {"description": "Sender not verified"},
        404: {"description": "Sender or recipient not found"},
    },
)
def create_transfer(
    payload: TransferCreate,
    db: Session = Depends(get_db),
) -> TransferReceipt:
    """Move points between two members.

    Example request body::

        {
            "sender_id": 7,
            "recipient_id": 9,
            "amount": 40,
            "remark": "Thanks for the notes!"
        }
    """

    try:
        result = transfer_service.transfer(
            db,
            sender_id=payload.sender_id,
            recipient_id=payload.recipient_id,
            amount=payload.amount,
            remark=payload.remark,
        )
        db.commit()
        db.refresh(result.sender_transaction)
        db.refresh(result.recipient_transaction)
        return TransferReceipt(
            sender_transaction=result.sender_transaction,
            recipient_transaction=result.recipient_transaction,
        )
    except LedgerError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
