"""Event reward budget models."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base


class Event(Base):
    """Event with a capped pool of points to distribute to guests."""

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("points_remain >= 0", name="events_points_remain_non_negative"),
        CheckConstraint("points_awarded >= 0", name="events_points_awarded_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, default="")
    points = Column(Integer, nullable=False)
    points_awarded = Column(Integer, nullable=False, default=0)
    points_remain = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    guests = relationship("EventGuest", back_populates="event", order_by="EventGuest.account_id")


class EventGuest(Base):
    """Guest registration; rows are maintained by the RSVP subsystem."""

    __tablename__ = "event_guests"
    __table_args__ = (
        UniqueConstraint("event_id", "account_id", name="event_guests_unique"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False)

    event = relationship("Event", back_populates="guests")
    account = relationship("Account")
