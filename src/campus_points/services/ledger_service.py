"""Ledger store: the only code path that changes account balances."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from ..models import Account, Transaction, TransactionPromotion, TransactionType
from ..utils.datetime import utcnow
from .exceptions import InsufficientFundsError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def get_account(session: Session, account_id: int) -> Account:
    account = session.get(Account, account_id)
    if account is None:
        raise NotFoundError(f"Account {account_id} not found")
    return account


def get_transaction(session: Session, transaction_id: int, *, for_update: bool = False) -> Transaction:
    stmt = select(Transaction).where(Transaction.id == transaction_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    transaction = session.execute(stmt).scalar_one_or_none()
    if transaction is None:
        raise NotFoundError(f"Transaction {transaction_id} not found")
    return transaction


def lock_accounts(session: Session, account_ids: Iterable[int]) -> dict[int, Account]:
    """Lock accounts in ascending id order and return them keyed by id.

    Every multi-account operation goes through here so row locks are always
    taken in the same global order.
    """

    wanted = sorted(set(account_ids))
    if not wanted:
        return {}
    stmt = (
        select(Account)
        .where(Account.id.in_(wanted))
        .order_by(Account.id.asc())
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    accounts = {account.id: account for account in session.execute(stmt).scalars()}
    missing = [account_id for account_id in wanted if account_id not in accounts]
    if missing:
        raise NotFoundError(f"Account {missing[0]} not found")
    return accounts


def lock_account(session: Session, account_id: int) -> Account:
    return lock_accounts(session, [account_id])[account_id]


def apply_delta(session: Session, account: Account, delta: int) -> Account:
    """Change a locked account's cached balance, refusing to go below zero."""

    if delta == 0:
        return account
    new_balance = account.points + delta
    if new_balance < 0:
        raise InsufficientFundsError(
            f"Insufficient points: balance {account.points}, change {delta}."
        )
    account.points = new_balance
    account.updated_at = utcnow()
    session.flush()
    return account


def record(session: Session, entry: Transaction, *, account: Optional[Account] = None) -> Transaction:
    """Append ``entry`` and apply its amount to the owner's balance.

    Suspicious entries are stored at full value but contribute nothing until
    the flag is cleared. The balance check happens before anything is
    flushed, so a failure leaves the session untouched.
    """

    if not isinstance(entry.amount, int) or isinstance(entry.amount, bool):
        raise ValidationError("Transaction amount must be an integer number of points.")

    owner = account if account is not None else lock_account(session, entry.account_id)
    if owner.id != entry.account_id:
        raise ValidationError("Transaction does not belong to the supplied account.")

    delta = 0 if entry.suspicious else entry.amount
    apply_delta(session, owner, delta)

    if entry.created_at is None:
        entry.created_at = utcnow()
    session.add(entry)
    session.flush()
    for promotion_id in dict.fromkeys(entry.promotion_ids or ()):
        session.add(TransactionPromotion(transaction_id=entry.id, promotion_id=promotion_id))
    if entry.promotion_ids:
        session.flush()
    logger.debug(
        "recorded %s transaction %s for account %s (amount=%s, applied=%s)",
        entry.type.value,
        entry.id,
        owner.id,
        entry.amount,
        delta,
    )
    return entry


def balance(session: Session, account_id: int) -> int:
    """Return the cached balance."""

    return get_account(session, account_id).points


def ledger_balance(session: Session, account_id: int) -> int:
    """Recompute a balance from the non-suspicious ledger rows."""

    stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
        Transaction.account_id == account_id,
        Transaction.suspicious.is_(False),
    )
    return int(session.execute(stmt).scalar_one())


def audit_balances(session: Session) -> list[tuple[int, int, int]]:
    """Return ``(account_id, cached, ledger)`` for every account that drifted."""

    ledger_total = func.coalesce(
        func.sum(case((Transaction.suspicious.is_(False), Transaction.amount), else_=0)),
        0,
    ).label("ledger_total")
    stmt = (
        select(Account.id, Account.points, ledger_total)
        .outerjoin(Transaction, Transaction.account_id == Account.id)
        .group_by(Account.id, Account.points)
        .order_by(Account.id.asc())
    )
    drift = []
    for account_id, cached, computed in session.execute(stmt).all():
        if int(cached) != int(computed):
            logger.warning(
                "balance drift on account %s: cached=%s ledger=%s", account_id, cached, computed
            )
            drift.append((account_id, int(cached), int(computed)))
    return drift


def list_transactions(
    session: Session,
    *,
    account_id: Optional[int] = None,
    type: Optional[TransactionType] = None,
    suspicious: Optional[bool] = None,
    related_id: Optional[int] = None,
    promotion_id: Optional[int] = None,
    amount: Optional[int] = None,
    operator: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[Transaction]:
    """Retrieve transactions, newest first, with optional filters."""

    stmt = select(Transaction).order_by(Transaction.id.desc())

    if account_id is not None:
        stmt = stmt.where(Transaction.account_id == account_id)
    if type is not None:
        stmt = stmt.where(Transaction.type == type)
    if suspicious is not None:
        stmt = stmt.where(Transaction.suspicious.is_(suspicious))
    if related_id is not None:
        stmt = stmt.where(Transaction.related_id == related_id)
    if amount is not None:
        if operator == "gte":
            stmt = stmt.where(Transaction.amount >= amount)
        elif operator == "lte":
            stmt = stmt.where(Transaction.amount <= amount)
        else:
            raise ValidationError("operator must be 'gte' or 'lte' when filtering by amount.")

    if promotion_id is not None:
        tagged = select(TransactionPromotion.transaction_id).where(
            TransactionPromotion.promotion_id == promotion_id
        )
        stmt = stmt.where(Transaction.id.in_(tagged))

    return session.execute(stmt.offset(offset).limit(limit)).scalars().all()
