"""Pydantic schemas for ledger transactions."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import TransactionType


class TransactionRead(BaseModel):
    """Ledger entry as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: int
    type: TransactionType
    amount: int
    spent: Optional[Decimal] = None
    redeemed: Optional[int] = None
    related_id: Optional[int] = None
    promotion_ids: Optional[List[int]] = None
    suspicious: bool
    remark: str
    created_by: Optional[str] = None
    created_at: datetime


class PurchaseCreate(BaseModel):
    """Request body for crediting a purchase."""

    account_id: int
    spent: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Dollar amount spent.")
    promotion_ids: List[int] = Field(default_factory=list)
    remark: Optional[str] = Field(None, max_length=280)
    created_by_id: int = Field(..., description="Cashier account recording the purchase.")


class PurchaseReceipt(BaseModel):
    transaction: TransactionRead
    earned_points: int
    applied_promotion_ids: List[int]


class AdjustmentCreate(BaseModel):
    """Request body for a manual correction."""

    account_id: int
    amount: int = Field(..., description="Signed points delta; must not be zero.")
    related_transaction_id: int
    promotion_ids: List[int] = Field(default_factory=list)
    remark: Optional[str] = Field(None, max_length=280)
    created_by_id: int


class SuspiciousUpdate(BaseModel):
    suspicious: bool
