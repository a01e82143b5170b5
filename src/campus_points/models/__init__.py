"""SQLAlchemy models for Campus Points."""

from .account import Account
from .event import Event, EventGuest
from .promotion import Promotion, PromotionType, PromotionUsage
from .transaction import FLAGGABLE_TYPES, Transaction, TransactionPromotion, TransactionType

__all__ = [
    "Account",
    "Event",
    "EventGuest",
    "FLAGGABLE_TYPES",
    "Promotion",
    "PromotionType",
    "PromotionUsage",
    "Transaction",
    "TransactionPromotion",
    "TransactionType",
]
