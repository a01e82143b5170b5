"""Event budget and award endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...schemas import EventAwardCreate, EventAwardReceipt, EventBudgetUpdate, EventCreate, EventRead
from ...services import event_service, ledger_service
from ...services.exceptions import LedgerError

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventRead, status_code=status.HTTP_201_CREATED, summary="Create an event budget")
def create_event(payload: EventCreate, db: Session = Depends(get_db)) -> EventRead:
    try:
        event = event_service.create_event(db, name=payload.name, points=payload.points)
        db.commit()
        db.refresh(event)
        return event
    except LedgerError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.patch("/{event_id}/budget", response_model=EventRead, summary="Resize an event budget")
def update_budget(event_id: int, payload: EventBudgetUpdate, db: Session = Depends(get_db)) -> EventRead:
    try:
        event = event_service.update_event_budget(db, event_id=event_id, points=payload.points)
        db.commit()
        db.refresh(event)
        return event
    except LedgerError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/{event_id}/awards",
    response_model=EventAwardReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Award event points",
    responses={
        400: {"description": "Budget exceeded or account not a guest"},
        404: {"description": "Event or account not found"},
    },
)
def award_points(
    event_id: int,
    payload: EventAwardCreate,
    db: Session = Depends(get_db),
) -> EventAwardReceipt:
    """Award points to one guest, or to every guest when no account is given."""

    try:
        organizer = ledger_service.get_account(db, payload.created_by_id)
        awarded = event_service.award_event_points(
            db,
            event_id=event_id,
            amount=payload.amount,
            account_id=payload.account_id,
            remark=payload.remark,
            created_by=organizer.utorid,
        )
        db.commit()
        transactions = awarded if isinstance(awarded, list) else [awarded]
        for transaction in transactions:
            db.refresh(transaction)
        event = event_service.get_event(db, event_id)
        return EventAwardReceipt(event=event, transactions=transactions)
    except LedgerError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
