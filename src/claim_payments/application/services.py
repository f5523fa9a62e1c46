from dataclasses import dataclass
from datetime import date
from decimal import Decimal

import structlog

from claim_payments.application.unit_of_work import UnitOfWork
from claim_payments.domain.exceptions import (
    ClaimNotApprovedError,
    ClaimNotFoundError,
    DomainError,
    DuplicateTransactionReferenceError,
    IllegalStateTransitionError,
    InvalidInputError,
    PaymentExceedsClaimAmountError,
    PaymentNotFoundError,
)
from claim_payments.domain.models import (
    MoneyAmount,
    Payment,
    PaymentMethod,
    PaymentStatus,
    TransactionReference,
)
from claim_payments.infrastructure.metrics import (
    PAYMENT_REQUESTS_TOTAL,
    PAYMENT_STATUS_TRANSITIONS_TOTAL,
    track_payment_duration,
)


logger = structlog.get_logger()


def _require_text(field: str, value: str | None) -> None:
    if value is None or not value.strip():
        raise InvalidInputError(field, "cannot be null or blank")


@dataclass
class ProcessPaymentCommand:
    claim_id: int
    amount: Decimal | int | str
    payment_method: str
    transaction_reference: str
    processed_by: str
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.claim_id is None:
            raise InvalidInputError("claim_id", "cannot be null")
        if self.amount is None:
            raise InvalidInputError("amount", "cannot be null")
        _require_text("payment_method", self.payment_method)
        _require_text("transaction_reference", self.transaction_reference)
        _require_text("processed_by", self.processed_by)


@dataclass
class ProcessPaymentResult:
    payment_id: str
    status: PaymentStatus
    payment_date: date
    transaction_reference: str


class PaymentService:
    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    @track_payment_duration
    async def process_payment(self, cmd: ProcessPaymentCommand) -> ProcessPaymentResult:
        log = logger.bind(
            claim_id=cmd.claim_id,
            transaction_reference=cmd.transaction_reference,
            processed_by=cmd.processed_by,
        )
        log.info("payment_processing_started")

        try:
            result = await self._process(cmd, log)
        except DomainError as e:
            PAYMENT_REQUESTS_TOTAL.labels(status="REJECTED", error_code=e.code).inc()
            log.info("payment_rejected", error_code=e.code, reason=str(e))
            raise

        PAYMENT_REQUESTS_TOTAL.labels(status=result.status.value, error_code="").inc()
        return result

    async def _process(self, cmd: ProcessPaymentCommand, log: structlog.stdlib.BoundLogger) -> ProcessPaymentResult:
        async with self.uow:
            claim = await self.uow.claims.get(cmd.claim_id)
            if claim is None:
                raise ClaimNotFoundError(cmd.claim_id)

            if not claim.is_approved or claim.claimed_amount is None:
                raise ClaimNotApprovedError(cmd.claim_id, claim.status.value)

            # The unique index on payments.transaction_reference backs this check up
            # when two requests race past it; add() reports that case the same way.
            normalized_reference = TransactionReference.normalize(cmd.transaction_reference)
            if await self.uow.payments.exists_by_transaction_reference(normalized_reference):
                raise DuplicateTransactionReferenceError(normalized_reference)

            log.info("payment_claim_verified", step="1/3", claim_status=claim.status.value)

            amount = MoneyAmount(cmd.amount)
            if amount.greater_than(claim.claimed_amount):
                raise PaymentExceedsClaimAmountError(amount.value, claim.claimed_amount.value)

            payment = Payment.create(
                claim_id=cmd.claim_id,
                amount=amount,
                payment_method=PaymentMethod.parse(cmd.payment_method),
                transaction_reference=TransactionReference(cmd.transaction_reference),
                processed_by=cmd.processed_by,
                notes=cmd.notes,
            )

            log.info(
                "payment_validated",
                step="2/3",
                amount=str(payment.amount),
                claimed_amount=str(claim.claimed_amount),
                payment_method=payment.payment_method.value,
            )

            saved = await self.uow.payments.add(payment)
            await self.uow.commit()

            log.info("payment_created", step="3/3", payment_id=saved.id, status=saved.status.value)

            return ProcessPaymentResult(
                payment_id=saved.require_id(),
                status=saved.status,
                payment_date=saved.payment_date,
                transaction_reference=saved.transaction_reference.value,
            )

    async def get_payment(self, payment_id: str) -> Payment:
        async with self.uow:
            payment = await self.uow.payments.get(payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        logger.info(
            "get_payment",
            payment_id=payment.id,
            status=payment.status.value,
            amount=str(payment.amount),
        )
        return payment

    async def list_payments(
        self,
        claim_id: int | None = None,
        status: PaymentStatus | None = None,
    ) -> list[Payment]:
        async with self.uow:
            if claim_id is not None:
                payments = await self.uow.payments.list_by_claim(claim_id)
                if status is not None:
                    payments = [p for p in payments if p.status == status]
            elif status is not None:
                payments = await self.uow.payments.list_by_status(status)
            else:
                payments = await self.uow.payments.list_all()
        logger.info(
            "list_payments",
            claim_id=claim_id,
            status=status.value if status else None,
            count=len(payments),
        )
        return payments

    async def change_payment_status(self, payment_id: str, target: PaymentStatus) -> Payment:
        """Move a payment along its lifecycle and persist the new status.

        Raises:
            PaymentNotFoundError: no payment with this id.
            IllegalStateTransitionError: the move is not in the transition table.
        """
        async with self.uow:
            # Row lock serializes concurrent status changes on one payment.
            payment = await self.uow.payments.get_for_update(payment_id)
            if payment is None:
                raise PaymentNotFoundError(payment_id)

            previous = payment.status
            transitions = {
                PaymentStatus.PROCESSING: payment.mark_as_processing,
                PaymentStatus.COMPLETED: payment.mark_as_completed,
                PaymentStatus.FAILED: payment.mark_as_failed,
                PaymentStatus.REFUNDED: payment.mark_as_refunded,
            }
            mark = transitions.get(target)
            if mark is None:
                raise IllegalStateTransitionError(previous.value, target.value)
            mark()

            if not await self.uow.payments.update_status(payment_id, payment.status):
                raise PaymentNotFoundError(payment_id)
            await self.uow.commit()

        PAYMENT_STATUS_TRANSITIONS_TOTAL.labels(from_status=previous.value, to_status=payment.status.value).inc()
        logger.info(
            "payment_status_changed",
            payment_id=payment_id,
            from_status=previous.value,
            to_status=payment.status.value,
        )
        return payment
