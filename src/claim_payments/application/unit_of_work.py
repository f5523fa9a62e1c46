from types import TracebackType
from typing import Self

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from claim_payments.infrastructure.repositories import ClaimRepository, PaymentRepository


logger = structlog.get_logger()


class UnitOfWork:
    """Claim lookups and payment writes sharing one session.

    Nothing is committed implicitly: callers commit on success, and leaving
    the block with an exception rolls the transaction back.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.claims = ClaimRepository(session)
        self.payments = PaymentRepository(session)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            return
        await self.rollback()
        logger.debug("unit_of_work_rolled_back", error_type=exc_type.__name__)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
