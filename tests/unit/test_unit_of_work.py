"""Unit tests for UnitOfWork transaction handling."""

from unittest.mock import AsyncMock

import pytest

from claim_payments.application.unit_of_work import UnitOfWork
from claim_payments.domain.exceptions import ClaimNotFoundError
from claim_payments.infrastructure.repositories import ClaimRepository, PaymentRepository


@pytest.fixture
def session() -> AsyncMock:
    """Create mock AsyncSession."""
    return AsyncMock()


class TestUnitOfWork:
    """Tests for UnitOfWork."""

    def test_exposes_repositories(self, session: AsyncMock) -> None:
        """Both repositories share the session."""
        uow = UnitOfWork(session)

        assert isinstance(uow.claims, ClaimRepository)
        assert isinstance(uow.payments, PaymentRepository)

    @pytest.mark.asyncio
    async def test_commit(self, session: AsyncMock) -> None:
        """commit delegates to the session."""
        async with UnitOfWork(session) as uow:
            await uow.commit()

        session.commit.assert_awaited_once()
        session.rollback.assert_not_called()

    @pytest.mark.asyncio
    async def test_clean_exit_does_not_commit(self, session: AsyncMock) -> None:
        """Leaving the block without commit writes nothing."""
        async with UnitOfWork(session):
            pass

        session.commit.assert_not_called()
        session.rollback.assert_not_called()

    @pytest.mark.asyncio
    async def test_rollback_on_exception(self, session: AsyncMock) -> None:
        """An exception rolls back and propagates."""
        with pytest.raises(ClaimNotFoundError):
            async with UnitOfWork(session):
                raise ClaimNotFoundError(1)

        session.rollback.assert_awaited_once()
        session.commit.assert_not_called()
