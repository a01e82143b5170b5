"""Service layer exports."""

from . import (
	event_service,
	ledger_service,
	promotion_service,
	redemption_service,
	suspicious_service,
	transaction_service,
	transfer_service,
)

__all__ = [
	"event_service",
	"ledger_service",
	"promotion_service",
	"redemption_service",
	"suspicious_service",
	"transaction_service",
	"transfer_service",
]
