"""Promotion and per-account usage models."""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base


class PromotionType(str, enum.Enum):
    AUTOMATIC = "automatic"
    ONE_TIME = "one_time"


class Promotion(Base):
    """Bonus rule active during ``[start_time, end_time)``."""

    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, default="")
    type = Column(
        Enum(PromotionType, name="promotion_type", values_callable=lambda kinds: [k.value for k in kinds]),
        nullable=False,
    )
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    min_spending = Column(Numeric(10, 2))
    rate = Column(Float)
    points = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    usages = relationship("PromotionUsage", back_populates="promotion")

    def is_active(self, now: datetime) -> bool:
        return self.start_time <= now < self.end_time


class PromotionUsage(Base):
    """Marks a one-time promotion as consumed by an account."""

    __tablename__ = "promotion_usages"
    __table_args__ = (
        UniqueConstraint("account_id", "promotion_id", name="promotion_usages_unique"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False)
    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="RESTRICT"), nullable=False)
    used_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    account = relationship("Account", back_populates="promotion_usages")
    promotion = relationship("Promotion", back_populates="usages")
