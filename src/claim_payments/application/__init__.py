"""Application layer - services and use cases."""

from claim_payments.application.services import (
    PaymentService,
    ProcessPaymentCommand,
    ProcessPaymentResult,
)
from claim_payments.application.unit_of_work import UnitOfWork


__all__ = [
    "PaymentService",
    "ProcessPaymentCommand",
    "ProcessPaymentResult",
    "UnitOfWork",
]
