"""Promotion evaluation for purchases."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..models import Promotion, PromotionType, PromotionUsage
from ..utils.datetime import as_naive_utc, utcnow
from .exceptions import (
    MinimumSpendingNotMetError,
    PromotionAlreadyUsedError,
    PromotionNotActiveError,
    PromotionNotFoundError,
    ValidationError,
)


@dataclass
class PromotionOutcome:
    earned_points: int
    applied_promotion_ids: list[int] = field(default_factory=list)


def round_points(value: Decimal) -> int:
    """Round half away from zero to whole points."""

    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps float inputs like 0.1 from dragging binary noise into the math
    return Decimal(str(value))


def _unique(ids: Iterable[int]) -> list[int]:
    seen: set[int] = set()
    ordered = []
    for promotion_id in ids:
        if promotion_id not in seen:
            seen.add(promotion_id)
            ordered.append(promotion_id)
    return ordered


def get_promotion(session: Session, promotion_id: int) -> Promotion:
    promotion = session.get(Promotion, promotion_id)
    if promotion is None:
        raise PromotionNotFoundError(f"Promotion {promotion_id} does not exist")
    return promotion


def has_used(session: Session, account_id: int, promotion_id: int) -> bool:
    stmt = select(PromotionUsage.id).where(
        PromotionUsage.account_id == account_id,
        PromotionUsage.promotion_id == promotion_id,
    )
    return session.execute(stmt).first() is not None


def _consume(session: Session, account_id: int, promotion_id: int) -> None:
    usage = PromotionUsage(account_id=account_id, promotion_id=promotion_id, used_at=utcnow())
    session.add(usage)
    try:
        session.flush()
    except IntegrityError as exc:
        raise PromotionAlreadyUsedError(f"Promotion {promotion_id} has already been used") from exc


def evaluate_purchase(
    session: Session,
    *,
    account_id: int,
    spent,
    promotion_ids: Sequence[int] = (),
    now: Optional[datetime] = None,
) -> PromotionOutcome:
    """Compute points earned for a purchase and consume one-time promotions.

    Usage rows are written into ``session``; the caller commits them together
    with the purchase entry or rolls both back.
    """

    amount = to_decimal(spent)
    if amount <= 0:
        raise ValidationError("spent must be a positive number")

    moment = as_naive_utc(now) if now is not None else utcnow()
    earned = round_points(amount * get_settings().points_per_dollar)
    applied: list[int] = []

    for promotion_id in _unique(promotion_ids):
        promotion = get_promotion(session, promotion_id)

        if not promotion.is_active(moment):
            state = "has not started yet" if moment < promotion.start_time else "has expired"
            raise PromotionNotActiveError(f"Promotion {promotion_id} {state}")

        if promotion.type == PromotionType.ONE_TIME:
            if has_used(session, account_id, promotion_id):
                raise PromotionAlreadyUsedError(f"Promotion {promotion_id} has already been used")
            if promotion.points is not None:
                earned += promotion.points
            _consume(session, account_id, promotion_id)
        else:
            if promotion.min_spending is not None and amount < to_decimal(promotion.min_spending):
                raise MinimumSpendingNotMetError(
                    f"Minimum spending of {promotion.min_spending} not met for promotion {promotion_id}"
                )
            if promotion.rate is not None:
                earned += round_points(amount * to_decimal(promotion.rate))
            if promotion.points is not None:
                earned += promotion.points

        applied.append(promotion_id)

    return PromotionOutcome(earned_points=earned, applied_promotion_ids=applied)


def create_promotion(
    session: Session,
    *,
    name: str,
    type: PromotionType,
    start_time: datetime,
    end_time: datetime,
    min_spending=None,
    rate: Optional[float] = None,
    points: Optional[int] = None,
) -> Promotion:
    """Insert a promotion after validating its window and bonus fields."""

    start = as_naive_utc(start_time)
    end = as_naive_utc(end_time)
    if end <= start:
        raise ValidationError("End time must be after start time")
    if min_spending is not None and to_decimal(min_spending) <= 0:
        raise ValidationError("minSpending must be a positive number")
    if rate is not None and rate <= 0:
        raise ValidationError("rate must be a positive number")
    if points is not None and (isinstance(points, bool) or not isinstance(points, int) or points < 0):
        raise ValidationError("points must be a non-negative integer")

    promotion = Promotion(
        name=name,
        type=PromotionType(type),
        start_time=start,
        end_time=end,
        min_spending=to_decimal(min_spending) if min_spending is not None else None,
        rate=rate,
        points=points,
    )
    session.add(promotion)
    session.flush()
    return promotion


def list_active_promotions(
    session: Session,
    *,
    account_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Sequence[Promotion]:
    """Promotions usable right now, hiding one-time offers the account has used."""

    moment = as_naive_utc(now) if now is not None else utcnow()
    stmt = (
        select(Promotion)
        .where(Promotion.start_time <= moment, Promotion.end_time > moment)
        .order_by(Promotion.end_time.asc(), Promotion.id.asc())
    )
    if account_id is not None:
        used = select(PromotionUsage.promotion_id).where(PromotionUsage.account_id == account_id)
        stmt = stmt.where(
            (Promotion.type != PromotionType.ONE_TIME) | Promotion.id.not_in(used)
        )
    return session.execute(stmt).scalars().all()
