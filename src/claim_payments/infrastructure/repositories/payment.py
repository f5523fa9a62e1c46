from datetime import UTC, datetime
from typing import Any, cast

from sqlalchemy import CursorResult, Row, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from ulid import ULID

from claim_payments.domain.exceptions import DuplicateTransactionReferenceError
from claim_payments.domain.models import (
    MoneyAmount,
    Payment,
    PaymentMethod,
    PaymentStatus,
    TransactionReference,
)


TRANSACTION_REFERENCE_INDEX = "ix_payments_transaction_reference"

_SELECT_PAYMENT = """
    SELECT id, claim_id, amount, payment_method, payment_status,
           transaction_reference, payment_date, processed_by, notes
    FROM payments
"""


def _is_transaction_reference_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return TRANSACTION_REFERENCE_INDEX in message or "payments.transaction_reference" in message


def _to_payment(row: Row[Any]) -> Payment:
    return Payment(
        id=row.id,
        claim_id=row.claim_id,
        amount=MoneyAmount(row.amount),
        payment_method=PaymentMethod(row.payment_method),
        status=PaymentStatus(row.payment_status),
        transaction_reference=TransactionReference(row.transaction_reference),
        payment_date=row.payment_date,
        processed_by=row.processed_by,
        notes=row.notes,
    )


class PaymentRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, payment_id: str) -> Payment | None:
        result = await self._session.execute(
            text(_SELECT_PAYMENT + " WHERE id = :id"),
            {"id": payment_id},
        )
        row = result.fetchone()
        if not row:
            return None
        return _to_payment(row)

    async def get_for_update(self, payment_id: str) -> Payment | None:
        result = await self._session.execute(
            text(_SELECT_PAYMENT + " WHERE id = :id FOR UPDATE"),
            {"id": payment_id},
        )
        row = result.fetchone()
        if not row:
            return None
        return _to_payment(row)

    async def get_by_transaction_reference(self, reference: TransactionReference | str) -> Payment | None:
        result = await self._session.execute(
            text(_SELECT_PAYMENT + " WHERE transaction_reference = :reference"),
            {"reference": TransactionReference.normalize(str(reference))},
        )
        row = result.fetchone()
        if not row:
            return None
        return _to_payment(row)

    async def exists_by_transaction_reference(self, reference: TransactionReference | str) -> bool:
        result = await self._session.execute(
            text("""
                SELECT 1
                FROM payments
                WHERE transaction_reference = :reference
            """),
            {"reference": TransactionReference.normalize(str(reference))},
        )
        return result.first() is not None

    async def add(self, payment: Payment) -> Payment:
        """Insert a new payment and assign its identity.

        A unique-index violation on the transaction reference is reported as
        DuplicateTransactionReferenceError; the session must then be rolled back.
        """
        payment_id = str(ULID())
        now = datetime.now(UTC)
        try:
            await self._session.execute(
                text("""
                    INSERT INTO payments
                        (id, claim_id, amount, payment_method, payment_status,
                         transaction_reference, payment_date, processed_by, notes,
                         created_at, updated_at)
                    VALUES
                        (:id, :claim_id, :amount, :payment_method, :payment_status,
                         :transaction_reference, :payment_date, :processed_by, :notes,
                         :created_at, :updated_at)
                """),
                {
                    "id": payment_id,
                    "claim_id": payment.claim_id,
                    "amount": payment.amount.value,
                    "payment_method": payment.payment_method.value,
                    "payment_status": payment.status.value,
                    "transaction_reference": payment.transaction_reference.value,
                    "payment_date": payment.payment_date,
                    "processed_by": payment.processed_by,
                    "notes": payment.notes,
                    "created_at": now,
                    "updated_at": now,
                },
            )
        except IntegrityError as e:
            if _is_transaction_reference_violation(e):
                raise DuplicateTransactionReferenceError(payment.transaction_reference.value) from e
            raise
        payment.id = payment_id
        return payment

    async def list_by_claim(self, claim_id: int) -> list[Payment]:
        result = await self._session.execute(
            text(_SELECT_PAYMENT + " WHERE claim_id = :claim_id ORDER BY created_at"),
            {"claim_id": claim_id},
        )
        return [_to_payment(row) for row in result.fetchall()]

    async def list_by_status(self, status: PaymentStatus) -> list[Payment]:
        result = await self._session.execute(
            text(_SELECT_PAYMENT + " WHERE payment_status = :status ORDER BY created_at"),
            {"status": status.value},
        )
        return [_to_payment(row) for row in result.fetchall()]

    async def list_all(self, limit: int = 100) -> list[Payment]:
        result = await self._session.execute(
            text(_SELECT_PAYMENT + " ORDER BY created_at DESC LIMIT :limit"),
            {"limit": limit},
        )
        return [_to_payment(row) for row in result.fetchall()]

    async def update_status(self, payment_id: str, status: PaymentStatus) -> bool:
        result = cast(
            "CursorResult[Any]",
            await self._session.execute(
                text("""
                    UPDATE payments
                    SET payment_status = :status,
                        updated_at = :updated_at
                    WHERE id = :id
                """),
                {
                    "id": payment_id,
                    "status": status.value,
                    "updated_at": datetime.now(UTC),
                },
            ),
        )
        return (result.rowcount or 0) > 0
