"""Retroactive balance effects of the suspicious flag."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..models import FLAGGABLE_TYPES, Transaction
from . import ledger_service
from .exceptions import WrongTypeError

logger = logging.getLogger(__name__)


def set_suspicious(session: Session, *, transaction_id: int, value: bool) -> Transaction:
    """Freeze or release a transaction's contribution to its owner's balance.

    Setting the flag debits ``amount``; clearing it credits ``amount``. A
    repeated value changes nothing.
    """

    transaction = ledger_service.get_transaction(session, transaction_id)
    if transaction.type not in FLAGGABLE_TYPES:
        raise WrongTypeError("Only purchase and adjustment transactions can be flagged")

    # Lock order: owning account, then the transaction row.
    account = ledger_service.lock_account(session, transaction.account_id)
    transaction = ledger_service.get_transaction(session, transaction_id, for_update=True)

    flag = bool(value)
    if bool(transaction.suspicious) == flag:
        return transaction

    delta = -transaction.amount if flag else transaction.amount
    ledger_service.apply_delta(session, account, delta)

    transaction.suspicious = flag
    session.flush()
    logger.info(
        "transaction %s marked %s; account %s balance changed by %s",
        transaction.id,
        "suspicious" if flag else "cleared",
        account.id,
        delta,
    )
    return transaction
