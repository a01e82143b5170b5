"""Event reward budgets and point distribution."""

from __future__ import annotations

import logging
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Event, EventGuest, Transaction, TransactionType
from ..utils.datetime import utcnow
from . import ledger_service
from .exceptions import BudgetExceededError, NotAGuestError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _positive_int(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{label} must be a positive integer")
    return value


def get_event(session: Session, event_id: int, *, for_update: bool = False) -> Event:
    stmt = select(Event).where(Event.id == event_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    event = session.execute(stmt).scalar_one_or_none()
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event


def guest_ids(session: Session, event_id: int) -> list[int]:
    stmt = (
        select(EventGuest.account_id)
        .where(EventGuest.event_id == event_id)
        .order_by(EventGuest.account_id.asc())
    )
    return list(session.execute(stmt).scalars())


def create_event(session: Session, *, name: str, points: int) -> Event:
    """Create an event with a fresh points budget."""

    budget = _positive_int(points, "Points")
    now = utcnow()
    event = Event(
        name=name,
        points=budget,
        points_awarded=0,
        points_remain=budget,
        created_at=now,
        updated_at=now,
    )
    session.add(event)
    session.flush()
    return event


def update_event_budget(session: Session, *, event_id: int, points: int) -> Event:
    """Resize an event budget without dropping below what was already awarded."""

    budget = _positive_int(points, "Points")
    event = get_event(session, event_id, for_update=True)
    remain = budget - event.points_awarded
    if remain < 0:
        raise BudgetExceededError("Cannot reduce points below already awarded amount")

    event.points = budget
    event.points_remain = remain
    event.updated_at = utcnow()
    session.flush()
    return event


def _award(session: Session, event: Event, account, amount: int, remark: str, created_by: Optional[str]) -> Transaction:
    entry = Transaction(
        account_id=account.id,
        type=TransactionType.EVENT,
        amount=amount,
        related_id=event.id,
        remark=remark,
        created_by=created_by,
        created_at=utcnow(),
    )
    return ledger_service.record(session, entry, account=account)


def award_event_points(
    session: Session,
    *,
    event_id: int,
    amount: int,
    account_id: Optional[int] = None,
    remark: Optional[str] = None,
    created_by: Optional[str] = None,
) -> Union[Transaction, list[Transaction]]:
    """Award points from an event budget.

    With ``account_id`` a single guest is awarded and one transaction is
    returned. Without it every guest receives ``amount``; the whole cost is
    checked against the budget before any balance changes and a list is
    returned (empty when the event has no guests).
    """

    amount = _positive_int(amount, "amount")
    text = remark or ""

    if account_id is not None:
        get_event(session, event_id)
        ledger_service.get_account(session, account_id)
        if account_id not in guest_ids(session, event_id):
            raise NotAGuestError("User is not on the guest list")

        account = ledger_service.lock_account(session, account_id)
        event = get_event(session, event_id, for_update=True)
        if event.points_remain < amount:
            raise BudgetExceededError("Insufficient points remaining")

        transaction = _award(session, event, account, amount, text, created_by)
        _spend_budget(event, amount)
        session.flush()
        logger.info("event %s awarded %s points to account %s", event.id, amount, account.id)
        return transaction

    get_event(session, event_id)
    recipients = guest_ids(session, event_id)
    accounts = ledger_service.lock_accounts(session, recipients)
    event = get_event(session, event_id, for_update=True)

    total = amount * len(recipients)
    if event.points_remain < total:
        raise BudgetExceededError("Insufficient points remaining")

    transactions = [
        _award(session, event, accounts[recipient], amount, text, created_by) for recipient in recipients
    ]
    if transactions:
        _spend_budget(event, total)
        session.flush()
        logger.info(
            "event %s awarded %s points to %s guests (%s total)",
            event.id,
            amount,
            len(transactions),
            total,
        )
    return transactions


def _spend_budget(event: Event, awarded: int) -> None:
    event.points_awarded += awarded
    event.points_remain -= awarded
    event.updated_at = utcnow()
