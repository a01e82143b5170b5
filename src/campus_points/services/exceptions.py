"""Typed failures raised by the ledger services.

Each error carries a human readable ``detail`` and the HTTP ``status_code``
the API layer should answer with.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..models import Transaction


class LedgerError(Exception):
    """Base class for ledger business rule violations."""

    status_code = 400

    def __init__(self, detail: str, status_code: Optional[int] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(LedgerError):
    """Malformed amount, type or other input."""


class SelfTransferError(ValidationError):
    pass


class NotAGuestError(ValidationError):
    pass


class NotFoundError(LedgerError):
    status_code = 404


class PromotionNotFoundError(NotFoundError):
    pass


class RecipientNotFoundError(NotFoundError):
    pass


class InsufficientFundsError(LedgerError):
    pass


class UnverifiedAccountError(LedgerError):
    status_code = 403


class UnverifiedSenderError(UnverifiedAccountError):
    pass


class PromotionNotActiveError(LedgerError):
    pass


class PromotionAlreadyUsedError(LedgerError):
    pass


class MinimumSpendingNotMetError(LedgerError):
    pass


class BudgetExceededError(LedgerError):
    pass


class AlreadyProcessedError(LedgerError):
    """Redemption was processed before; ``transaction`` holds its terminal state."""

    status_code = 409

    def __init__(self, detail: str, transaction: Optional["Transaction"] = None) -> None:
        super().__init__(detail)
        self.transaction = transaction


class WrongTypeError(LedgerError):
    pass


class PermissionDeniedError(LedgerError):
    status_code = 403
