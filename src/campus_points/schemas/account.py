"""Account balance projection."""

from pydantic import BaseModel


class AccountBalance(BaseModel):
    account_id: int
    utorid: str
    points: int
    verified: bool
