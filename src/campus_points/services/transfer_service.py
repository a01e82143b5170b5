"""Point transfers between members."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..models import Transaction, TransactionType
from ..utils.datetime import utcnow
from . import ledger_service
from .exceptions import (
    InsufficientFundsError,
    NotFoundError,
    RecipientNotFoundError,
    SelfTransferError,
    UnverifiedSenderError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass
class TransferResult:
    sender_transaction: Transaction
    recipient_transaction: Transaction


def transfer(
    session: Session,
    *,
    sender_id: int,
    recipient_id: int,
    amount: int,
    remark: Optional[str] = None,
) -> TransferResult:
    """Move points from sender to recipient as a pair of linked entries."""

    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("amount must be a positive integer")
    if sender_id == recipient_id:
        raise SelfTransferError("Members cannot transfer points to themselves.")

    sender = ledger_service.get_account(session, sender_id)
    if not sender.verified:
        raise UnverifiedSenderError("Sender must be verified")
    if sender.points < amount:
        raise InsufficientFundsError("Insufficient points")

    try:
        accounts = ledger_service.lock_accounts(session, [sender_id, recipient_id])
    except NotFoundError as exc:
        raise RecipientNotFoundError(f"Recipient {recipient_id} not found") from exc
    sender = accounts[sender_id]
    recipient = accounts[recipient_id]
    if not sender.verified:
        raise UnverifiedSenderError("Sender must be verified")

    now = utcnow()
    text = remark or ""
    outgoing = Transaction(
        account_id=sender.id,
        type=TransactionType.TRANSFER,
        amount=-amount,
        related_id=recipient.id,
        remark=text,
        created_by=sender.utorid,
        created_at=now,
    )
    incoming = Transaction(
        account_id=recipient.id,
        type=TransactionType.TRANSFER,
        amount=amount,
        related_id=sender.id,
        remark=text,
        created_by=sender.utorid,
        created_at=now,
    )
    # Re-checked against the locked balance inside record().
    ledger_service.record(session, outgoing, account=sender)
    ledger_service.record(session, incoming, account=recipient)

    logger.info("transfer of %s points from account %s to %s", amount, sender.id, recipient.id)
    return TransferResult(sender_transaction=outgoing, recipient_transaction=incoming)
