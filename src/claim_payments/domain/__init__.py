"""Domain layer - business entities and rules."""

from claim_payments.domain.exceptions import (
    ClaimNotApprovedError,
    ClaimNotFoundError,
    DomainError,
    DuplicateTransactionReferenceError,
    IllegalStateTransitionError,
    InvalidAmountError,
    InvalidInputError,
    InvalidPaymentMethodError,
    InvalidTransactionReferenceError,
    PaymentExceedsClaimAmountError,
    PaymentNotFoundError,
)
from claim_payments.domain.models import (
    ALLOWED_TRANSITIONS,
    Claim,
    ClaimStatus,
    MoneyAmount,
    Payment,
    PaymentMethod,
    PaymentStatus,
    TransactionReference,
    can_transition,
)


__all__ = [
    "ALLOWED_TRANSITIONS",
    "Claim",
    "ClaimNotApprovedError",
    "ClaimNotFoundError",
    "ClaimStatus",
    "DomainError",
    "DuplicateTransactionReferenceError",
    "IllegalStateTransitionError",
    "InvalidAmountError",
    "InvalidInputError",
    "InvalidPaymentMethodError",
    "InvalidTransactionReferenceError",
    "MoneyAmount",
    "Payment",
    "PaymentExceedsClaimAmountError",
    "PaymentMethod",
    "PaymentNotFoundError",
    "PaymentStatus",
    "TransactionReference",
    "can_transition",
]
