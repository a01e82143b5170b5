"""Pydantic schemas for promotions."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import PromotionType


class PromotionCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: PromotionType
    start_time: datetime
    end_time: datetime
    min_spending: Optional[Decimal] = Field(None, gt=0)
    rate: Optional[float] = Field(None, gt=0)
    points: Optional[int] = Field(None, ge=0)


class PromotionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: PromotionType
    start_time: datetime
    end_time: datetime
    min_spending: Optional[Decimal] = None
    rate: Optional[float] = None
    points: Optional[int] = None
