"""Pydantic schemas for member transfers."""

from pydantic import BaseModel, Field

from .transaction import TransactionRead


class TransferCreate(BaseModel):
    sender_id: int
    recipient_id: int
    amount: int = Field(..., gt=0, description="Points to move to the recipient.")
    remark: str | None = Field(None, max_length=280)


class TransferReceipt(BaseModel):
    sender_transaction: TransactionRead
    recipient_transaction: TransactionRead
