"""Domain-specific exceptions"""

from typing import Any, Dict

from fueleu_banking.domain.models import BankingFailure


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class PersistenceError(DomainException):
    """Ledger or compliance storage failed; the unit of work was rolled back"""

    pass


class BankingError(DomainException):
    """
    A banking request was rejected by a business rule.

    The message is user-facing and quotes the figures that caused the
    rejection; the same figures are kept in `context` so callers can retry
    with a corrected amount.
    """

    code = "BANKING_ERROR"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_failure(self) -> BankingFailure:
        return BankingFailure(code=self.code, message=self.message, context=dict(self.context))


class InvalidAmountError(BankingError):
    """Amount is zero, negative or not a number"""

    code = "INVALID_AMOUNT"


class InvalidEntryError(BankingError):
    """Raw ledger entry is malformed (empty ship, sign/type mismatch)"""

    code = "INVALID_ENTRY"


class ComplianceNotFoundError(BankingError):
    """No CB baseline exists for the ship-year"""

    code = "COMPLIANCE_NOT_FOUND"


class NoSurplusError(BankingError):
    """Banking requested while CB <= 0"""

    code = "NO_SURPLUS"


class NoDeficitError(BankingError):
    """Apply requested while CB >= 0"""

    code = "NO_DEFICIT"


class AmountExceedsSurplusError(BankingError):
    code = "AMOUNT_EXCEEDS_SURPLUS"


class AmountExceedsDeficitError(BankingError):
    code = "AMOUNT_EXCEEDS_DEFICIT"


class InsufficientBankedSurplusError(BankingError):
    code = "INSUFFICIENT_BANKED_SURPLUS"


class NoBankedSurplusError(BankingError):
    code = "NO_BANKED_SURPLUS"
