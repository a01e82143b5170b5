"""Purchase and adjustment entry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from ..models import Transaction, TransactionType
from ..utils.datetime import utcnow
from . import ledger_service, promotion_service
from .exceptions import PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

ADJUSTMENT_ROLES = frozenset({"manager", "superuser"})


@dataclass
class PurchaseResult:
    transaction: Transaction
    earned_points: int
    applied_promotion_ids: list[int] = field(default_factory=list)


def create_purchase(
    session: Session,
    *,
    account_id: int,
    spent,
    promotion_ids: Sequence[int] = (),
    remark: Optional[str] = None,
    created_by: Optional[str] = None,
    creator_suspicious: bool = False,
    now: Optional[datetime] = None,
) -> PurchaseResult:
    """Credit a member for money spent, stacking any promotions supplied.

    When the acting cashier is suspicious the entry is stored flagged and the
    points stay frozen until a manager clears it.
    """

    account = ledger_service.lock_account(session, account_id)
    outcome = promotion_service.evaluate_purchase(
        session,
        account_id=account.id,
        spent=spent,
        promotion_ids=promotion_ids,
        now=now,
    )

    entry = Transaction(
        account_id=account.id,
        type=TransactionType.PURCHASE,
        amount=outcome.earned_points,
        spent=promotion_service.to_decimal(spent),
        promotion_ids=outcome.applied_promotion_ids or None,
        suspicious=bool(creator_suspicious),
        remark=remark or "",
        created_by=created_by,
        created_at=utcnow(),
    )
    ledger_service.record(session, entry, account=account)

    if entry.suspicious:
        logger.info(
            "purchase %s for account %s flagged suspicious; %s points frozen",
            entry.id,
            account.id,
            entry.amount,
        )
    return PurchaseResult(
        transaction=entry,
        earned_points=outcome.earned_points,
        applied_promotion_ids=outcome.applied_promotion_ids,
    )


def create_adjustment(
    session: Session,
    *,
    account_id: int,
    amount: int,
    related_transaction_id: int,
    remark: Optional[str] = None,
    created_by: Optional[str] = None,
    creator_role: Optional[str] = None,
    promotion_ids: Optional[Sequence[int]] = None,
) -> Transaction:
    """Record a manual correction referencing an earlier transaction."""

    if creator_role is not None and creator_role not in ADJUSTMENT_ROLES:
        raise PermissionDeniedError("Manager or higher clearance required for adjustments", status_code=403)
    if isinstance(amount, bool) or not isinstance(amount, int) or amount == 0:
        raise ValidationError("amount must be a non-zero integer")

    related = ledger_service.get_transaction(session, related_transaction_id)
    account = ledger_service.lock_account(session, account_id)

    entry = Transaction(
        account_id=account.id,
        type=TransactionType.ADJUSTMENT,
        amount=amount,
        related_id=related.id,
        promotion_ids=list(promotion_ids) if promotion_ids else None,
        remark=remark or "",
        created_by=created_by,
        created_at=utcnow(),
    )
    ledger_service.record(session, entry, account=account)
    logger.info(
        "adjustment %s of %s points on account %s (corrects transaction %s)",
        entry.id,
        amount,
        account.id,
        related.id,
    )
    return entry
