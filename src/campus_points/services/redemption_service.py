"""Domain logic for member redemptions.

A redemption is requested by the member and later processed by a cashier.
The points leave the balance when the request is recorded; processing only
moves the entry to its terminal state.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Transaction, TransactionType
from ..utils.datetime import utcnow
from . import ledger_service
from .exceptions import (
    AlreadyProcessedError,
    InsufficientFundsError,
    UnverifiedAccountError,
    ValidationError,
    WrongTypeError,
)

logger = logging.getLogger(__name__)


def request_redemption(
    session: Session,
    *,
    account_id: int,
    amount: int,
    remark: Optional[str] = None,
    created_by: Optional[str] = None,
) -> Transaction:
    """Create a pending redemption for a verified member."""

    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("amount must be a positive integer")

    account = ledger_service.lock_account(session, account_id)
    if not account.verified:
        raise UnverifiedAccountError("User must be verified")
    if account.points < amount:
        raise InsufficientFundsError("Insufficient points")

    entry = Transaction(
        account_id=account.id,
        type=TransactionType.REDEMPTION,
        amount=-amount,
        redeemed=None,
        related_id=None,
        remark=remark or "",
        created_by=created_by or account.utorid,
        created_at=utcnow(),
    )
    return ledger_service.record(session, entry, account=account)


def process_redemption(
    session: Session,
    *,
    transaction_id: int,
    processor_id: int,
) -> Transaction:
    """Complete a pending redemption exactly once."""

    transaction = ledger_service.get_transaction(session, transaction_id, for_update=True)
    if transaction.type != TransactionType.REDEMPTION:
        raise WrongTypeError("Transaction is not a redemption")
    if transaction.related_id is not None:
        raise AlreadyProcessedError("Transaction has already been processed", transaction=transaction)

    processor = ledger_service.get_account(session, processor_id)

    transaction.redeemed = abs(transaction.amount)
    transaction.related_id = processor.id
    session.flush()

    logger.info(
        "redemption %s processed by account %s (%s points)",
        transaction.id,
        processor.id,
        transaction.redeemed,
    )
    return transaction


def list_pending_redemptions(
    session: Session,
    *,
    account_id: Optional[int] = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[Transaction]:
    """Return redemptions still waiting for a processor, oldest first."""

    stmt = (
        select(Transaction)
        .where(
            Transaction.type == TransactionType.REDEMPTION,
            Transaction.related_id.is_(None),
        )
        .order_by(Transaction.id.asc())
        .offset(offset)
        .limit(limit)
    )
    if account_id is not None:
        stmt = stmt.where(Transaction.account_id == account_id)
    return session.execute(stmt).scalars().all()
