"""Repository implementations."""

from claim_payments.infrastructure.repositories.claim import ClaimRepository
from claim_payments.infrastructure.repositories.payment import PaymentRepository


__all__ = [
    "ClaimRepository",
    "PaymentRepository",
]
