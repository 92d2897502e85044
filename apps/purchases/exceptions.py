"""
Domain exceptions for purchases app.

This module defines the exception hierarchy for ledger errors. Service
exceptions are plain Python exceptions raised by the ledger; the
APIException subclasses below are what the views turn them into.

Exception Hierarchy:
    PurchaseServiceError (base)
    ├── DuplicateTransactionError
    ├── InvalidCreditAmountError
    ├── ProductNotFoundError
    ├── PurchaseRecordNotFoundError
    ├── CreditNotFoundError
    ├── CreditAlreadyConsumedError
    ├── InsufficientCreditsError
    └── ConsumptionReversalError
"""
from rest_framework.exceptions import APIException


class PurchaseServiceError(Exception):
    """Base exception for purchase ledger errors."""
    pass


class DuplicateTransactionError(PurchaseServiceError):
    """Raised when a store transaction was already recorded."""

    def __init__(self, transaction_id):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} has already been processed")


class InvalidCreditAmountError(PurchaseServiceError):
    """Raised when a purchase would grant fewer than one credit."""
    pass


class ProductNotFoundError(PurchaseServiceError):
    """Raised when a store product identifier is not in the catalog."""
    pass


class PurchaseRecordNotFoundError(PurchaseServiceError):
    """Raised when no purchase record matches a transaction id."""
    pass


class CreditNotFoundError(PurchaseServiceError):
    """Raised when a credit id is unknown (e.g. removed by cascade)."""
    pass


class CreditAlreadyConsumedError(PurchaseServiceError):
    """Raised when the credit was spent by someone else first."""
    pass


class InsufficientCreditsError(PurchaseServiceError):
    """
    No unconsumed credit is available for the requested report area.

    This is an expected outcome; callers should route the user to the
    purchase flow instead of treating it as a failure.
    """
    pass


class ConsumptionReversalError(PurchaseServiceError):
    """Raised when code tries to mark a consumed credit as available again."""
    pass


# =============================================================================
# HTTP exceptions
# =============================================================================

class InvalidCreditAmountAPIError(APIException):
    """Credit amount must be at least one."""
    status_code = 400
    default_detail = 'A purchase must grant at least one credit.'
    default_code = 'invalid_credit_amount'


class ProductNotFoundAPIError(APIException):
    """Unknown store product."""
    status_code = 400
    default_detail = 'Product not available. Please try again later.'
    default_code = 'product_not_found'


class PurchaseNotFoundError(APIException):
    """Purchase record not found."""
    status_code = 404
    default_detail = 'Purchase record not found.'
    default_code = 'purchase_not_found'


class CreditNotFoundAPIError(APIException):
    """Credit not found."""
    status_code = 404
    default_detail = 'Credit not found. Refresh your available credits.'
    default_code = 'credit_not_found'


class CreditAlreadyConsumedAPIError(APIException):
    """Credit already consumed."""
    status_code = 409
    default_detail = 'This credit has already been used. Select another credit.'
    default_code = 'credit_already_consumed'


class InsufficientCreditsAPIError(APIException):
    """No credits left for the requested report."""
    status_code = 402
    default_detail = "You don't have enough credits. Please purchase more to continue."
    default_code = 'insufficient_credits'
