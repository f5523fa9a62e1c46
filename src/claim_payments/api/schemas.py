from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from claim_payments.application.services import ProcessPaymentResult
from claim_payments.domain.models import Payment


class ProcessPaymentRequest(BaseModel):
    claim_id: int = Field(examples=[1])
    amount: Decimal | str = Field(examples=["5000.00"])
    payment_method: str = Field(examples=["BANK_TRANSFER"])
    transaction_reference: str = Field(examples=["TXN1234567890"])
    processed_by: str = Field(max_length=100, examples=["admin@insurance.com"])
    notes: str | None = Field(default=None, max_length=500)


class ProcessPaymentResponse(BaseModel):
    payment_id: str
    status: str
    payment_date: date
    transaction_reference: str

    @classmethod
    def from_result(cls, result: ProcessPaymentResult) -> "ProcessPaymentResponse":
        return cls(
            payment_id=result.payment_id,
            status=result.status.value,
            payment_date=result.payment_date,
            transaction_reference=result.transaction_reference,
        )


class PaymentResponse(BaseModel):
    payment_id: str
    claim_id: int
    amount: Decimal
    payment_method: str
    status: str
    transaction_reference: str
    payment_date: date
    processed_by: str
    notes: str | None = None

    @classmethod
    def from_payment(cls, payment: Payment) -> "PaymentResponse":
        return cls(
            payment_id=payment.require_id(),
            claim_id=payment.claim_id,
            amount=payment.amount.value,
            payment_method=payment.payment_method.value,
            status=payment.status.value,
            transaction_reference=payment.transaction_reference.value,
            payment_date=payment.payment_date,
            processed_by=payment.processed_by,
            notes=payment.notes,
        )


class ChangePaymentStatusRequest(BaseModel):
    status: str = Field(examples=["PROCESSING"])


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail
