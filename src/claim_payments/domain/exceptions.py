from decimal import Decimal
from typing import Any


class DomainError(Exception):
    """Base exception for domain errors."""

    code = "DOMAIN_ERROR"


class InvalidInputError(DomainError):
    """Raised when a required field is missing or blank."""

    code = "INVALID_INPUT"

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InvalidAmountError(DomainError):
    """Raised when payment amount is invalid."""

    code = "INVALID_AMOUNT"

    def __init__(self, amount: Any, reason: str) -> None:
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid amount {amount}: {reason}")


class InvalidTransactionReferenceError(DomainError):
    """Raised when a transaction reference is blank or malformed."""

    code = "INVALID_TRANSACTION_REFERENCE"

    def __init__(self, reference: str | None, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"Invalid transaction reference {reference!r}: {reason}")


class InvalidPaymentMethodError(DomainError):
    """Raised when a payment method string matches no known method."""

    code = "INVALID_PAYMENT_METHOD"

    def __init__(self, method: str | None) -> None:
        self.method = method
        super().__init__(f"Invalid payment method: {method}")


class ClaimNotFoundError(DomainError):
    """Raised when a claim cannot be found."""

    code = "CLAIM_NOT_FOUND"

    def __init__(self, claim_id: int) -> None:
        self.claim_id = claim_id
        super().__init__(f"Claim not found with ID: {claim_id}")


class ClaimNotApprovedError(DomainError):
    """Raised when a payment targets a claim that is not approved."""

    code = "CLAIM_NOT_APPROVED"

    def __init__(self, claim_id: int, status: str) -> None:
        self.claim_id = claim_id
        self.status = status
        super().__init__(f"Claim {claim_id} is not approved (status: {status})")


class DuplicateTransactionReferenceError(DomainError):
    """Raised when a transaction reference was already used by another payment."""

    code = "DUPLICATE_TRANSACTION_REFERENCE"

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"Transaction reference already exists: {reference}")


class PaymentExceedsClaimAmountError(DomainError):
    """Raised when the payment amount is greater than the claimed amount."""

    code = "PAYMENT_EXCEEDS_CLAIM_AMOUNT"

    def __init__(self, payment_amount: Decimal, claimed_amount: Decimal) -> None:
        self.payment_amount = payment_amount
        self.claimed_amount = claimed_amount
        super().__init__(f"Payment amount ({payment_amount}) cannot exceed claim amount ({claimed_amount})")


class PaymentNotFoundError(DomainError):
    """Raised when a payment cannot be found."""

    code = "PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(f"Payment not found with ID: {payment_id}")


class IllegalStateTransitionError(DomainError):
    """Raised when a payment status change is not allowed by the lifecycle."""

    code = "ILLEGAL_STATE_TRANSITION"

    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Cannot transition from {from_status} to {to_status}")
