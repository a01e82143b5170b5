"""Promotion endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...schemas import PromotionCreate, PromotionRead
from ...services import promotion_service
from ...services.exceptions import LedgerError

router = APIRouter(prefix="/promotions", tags=["promotions"])


@router.post("", response_model=PromotionRead, status_code=status.HTTP_201_CREATED, summary="Create a promotion")
def create_promotion(payload: PromotionCreate, db: Session = Depends(get_db)) -> PromotionRead:
    try:
        promotion = promotion_service.create_promotion(
            db,
            name=payload.name,
            type=payload.type,
            start_time=payload.start_time,
            end_time=payload.end_time,
            min_spending=payload.min_spending,
            rate=payload.rate,
            points=payload.points,
        )
        db.commit()
        db.refresh(promotion)
        return promotion
    except LedgerError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/active", response_model=List[PromotionRead], summary="Promotions usable now")
def list_active(
    account_id: Optional[int] = Query(None, description="Hide one-time promotions this account used"),
    db: Session = Depends(get_db),
) -> List[PromotionRead]:
    return list(promotion_service.list_active_promotions(db, account_id=account_id))
