"""Pydantic schemas for redemption workflows."""

from pydantic import BaseModel, Field


class RedemptionCreate(BaseModel):
    """Incoming payload for requesting a redemption."""

    account_id: int
    amount: int = Field(..., gt=0, description="Number of points to redeem.")
    remark: str | None = Field(None, max_length=280)


class RedemptionProcess(BaseModel):
    """Cashier confirmation that a redemption was handed out."""

    processed: bool = Field(..., description="Must be true.")
    processor_id: int
