"""Public schema exports."""

from .account import AccountBalance
from .event import EventAwardCreate, EventAwardReceipt, EventBudgetUpdate, EventCreate, EventRead
from .promotion import PromotionCreate, PromotionRead
from .redemption import RedemptionCreate, RedemptionProcess
from .transaction import (
    AdjustmentCreate,
    PurchaseCreate,
    PurchaseReceipt,
    SuspiciousUpdate,
    TransactionRead,
)
from .transfer import TransferCreate, TransferReceipt

__all__ = [
	"AccountBalance",
	"AdjustmentCreate",
	"EventAwardCreate",
	"EventAwardReceipt",
	"EventBudgetUpdate",
	"EventCreate",
	"EventRead",
	"PromotionCreate",
	"PromotionRead",
	"PurchaseCreate",
	"PurchaseReceipt",
	"RedemptionCreate",
	"RedemptionProcess",
	"SuspiciousUpdate",
	"TransactionRead",
	"TransferCreate",
	"TransferReceipt",
]
