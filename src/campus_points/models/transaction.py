"""Ledger transaction model capturing balance movements."""

import enum
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, PrimaryKeyConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base


class TransactionType(str, enum.Enum):
    """Ledger entry classification."""

    PURCHASE = "purchase"
    REDEMPTION = "redemption"
    TRANSFER = "transfer"
    ADJUSTMENT = "adjustment"
    EVENT = "event"


# Only these types carry a meaningful suspicious flag.
FLAGGABLE_TYPES = frozenset({TransactionType.PURCHASE, TransactionType.ADJUSTMENT})


class Transaction(Base):
    """Append-only ledger entry; ``amount`` is the signed delta for ``account_id``.

    ``related_id`` depends on the type: the corrected transaction for
    adjustments, the counterparty account for transfers, the processor account
    for completed redemptions and the event for event awards.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False, index=True)
    type = Column(
        Enum(TransactionType, name="transaction_type", values_callable=lambda kinds: [k.value for k in kinds]),
        nullable=False,
    )
    amount = Column(Integer, nullable=False)
    spent = Column(Numeric(10, 2))
    redeemed = Column(Integer)
    related_id = Column(Integer)
    promotion_ids = Column(JSON)
    suspicious = Column(Boolean, nullable=False, default=False)
    remark = Column(String, nullable=False, default="")
    created_by = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    account = relationship("Account", back_populates="transactions")

    @property
    def processed(self) -> bool:
        return self.type == TransactionType.REDEMPTION and self.related_id is not None


class TransactionPromotion(Base):
    """Indexed copy of ``Transaction.promotion_ids`` for filtering by promotion."""

    __tablename__ = "transaction_promotions"
    __table_args__ = (
        PrimaryKeyConstraint("transaction_id", "promotion_id", name="transaction_promotions_pkey"),
    )

    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False)
    promotion_id = Column(Integer, nullable=False, index=True)
