"""Pydantic schemas for event budgets and awards."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .transaction import TransactionRead


class EventCreate(BaseModel):
    name: str = Field(..., min_length=1)
    points: int = Field(..., gt=0, description="Total points the event may distribute.")


class EventBudgetUpdate(BaseModel):
    points: int = Field(..., gt=0)


class EventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    points: int
    points_awarded: int
    points_remain: int


class EventAwardCreate(BaseModel):
    """Award to one guest when ``account_id`` is set, otherwise to all guests."""

    amount: int = Field(..., gt=0)
    account_id: Optional[int] = None
    remark: Optional[str] = Field(None, max_length=280)
    created_by_id: int = Field(..., description="Organizer account awarding the points.")


class EventAwardReceipt(BaseModel):
    event: EventRead
    transactions: List[TransactionRead]
