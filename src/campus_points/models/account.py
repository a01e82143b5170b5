"""Member account model."""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base


class Account(Base):
    """Program member holding a points balance.

    Identity fields belong to the identity subsystem; the ledger only writes
    ``points``.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("utorid", name="accounts_utorid_unique"),
        CheckConstraint("points >= 0", name="accounts_points_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    utorid = Column(String, nullable=False)
    name = Column(String, nullable=False, default="")
    role = Column(String, nullable=False, default="regular")
    points = Column(Integer, nullable=False, default=0)
    verified = Column(Boolean, nullable=False, default=False)
    suspicious = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    transactions = relationship("Transaction", back_populates="account")
    promotion_usages = relationship("PromotionUsage", back_populates="account")
