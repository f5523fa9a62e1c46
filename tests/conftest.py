"""Shared pytest fixtures for claim payments tests."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from claim_payments.application.unit_of_work import UnitOfWork
from claim_payments.domain.models import (
    Claim,
    ClaimStatus,
    MoneyAmount,
    Payment,
    PaymentMethod,
    PaymentStatus,
    TransactionReference,
)


@pytest.fixture
def mock_claim_repository() -> AsyncMock:
    """Create mock ClaimRepository."""
    repo = AsyncMock()
    repo.get = AsyncMock(return_value=None)
    repo.get_for_update = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_payment_repository() -> AsyncMock:
    """Create mock PaymentRepository.

    ``add`` behaves like the real store: it assigns an id and returns the payment.
    """

    async def _add(payment: Payment) -> Payment:
        payment.id = "01JC0000000000000000000001"
        return payment

    repo = AsyncMock()
    repo.get = AsyncMock(return_value=None)
    repo.get_by_transaction_reference = AsyncMock(return_value=None)
    repo.exists_by_transaction_reference = AsyncMock(return_value=False)
    repo.add = AsyncMock(side_effect=_add)
    repo.list_by_claim = AsyncMock(return_value=[])
    repo.list_by_status = AsyncMock(return_value=[])
    repo.list_all = AsyncMock(return_value=[])
    repo.update_status = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def mock_uow(
    mock_claim_repository: AsyncMock,
    mock_payment_repository: AsyncMock,
) -> AsyncMock:
    """Create mock Unit of Work with both repositories."""
    uow = AsyncMock(spec=UnitOfWork)
    uow.claims = mock_claim_repository
    uow.payments = mock_payment_repository
    uow.commit = AsyncMock(return_value=None)
    uow.rollback = AsyncMock(return_value=None)

    # Configure async context manager
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=None)

    return uow


@pytest.fixture
def approved_claim() -> Claim:
    """Claim #1, approved for 10000.00."""
    return create_claim(claim_id=1, status=ClaimStatus.APPROVED, claimed_amount="10000.00")


@pytest.fixture
def submitted_claim() -> Claim:
    """Claim #1 still waiting for review."""
    return create_claim(claim_id=1, status=ClaimStatus.SUBMITTED, claimed_amount="10000.00")


@pytest.fixture
def sample_payment() -> Payment:
    """Create a persisted PENDING payment."""
    return create_payment()


def create_claim(
    claim_id: int = 1,
    status: ClaimStatus = ClaimStatus.APPROVED,
    claimed_amount: str | None = "10000.00",
) -> Claim:
    """Helper to create Claim with custom values."""
    return Claim(
        id=claim_id,
        status=status,
        claimed_amount=MoneyAmount(Decimal(claimed_amount)) if claimed_amount is not None else None,
    )


def create_payment(
    payment_id: str | None = "01JC0000000000000000000001",
    claim_id: int = 1,
    amount: str = "5000.00",
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
    reference: str = "TXN1234567890",
    status: PaymentStatus = PaymentStatus.PENDING,
    payment_date: date | None = None,
    processed_by: str = "admin@insurance.com",
    notes: str | None = None,
) -> Payment:
    """Helper to create Payment with custom values."""
    return Payment(
        id=payment_id,
        claim_id=claim_id,
        amount=MoneyAmount(Decimal(amount)),
        payment_method=method,
        transaction_reference=TransactionReference(reference),
        status=status,
        payment_date=payment_date or date.today(),
        processed_by=processed_by,
        notes=notes,
    )
