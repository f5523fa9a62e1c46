import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from claim_payments.domain.exceptions import InvalidAmountError
from claim_payments.domain.models import Claim, ClaimStatus, MoneyAmount


logger = structlog.get_logger()


class ClaimRepository:
    """Read-only access to claims owned by the claims system.

    Rows are mapped leniently: an unrecognized status becomes
    ClaimStatus.UNKNOWN and a missing or non-positive claimed amount becomes
    None, so such claims read as not payable instead of failing the lookup.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, claim_id: int) -> Claim | None:
        result = await self._session.execute(
            text("""
                SELECT id, status, claimed_amount
                FROM claims
                WHERE id = :id
            """),
            {"id": claim_id},
        )
        row = result.fetchone()
        if not row:
            return None

        status = ClaimStatus.parse(row.status)
        if status == ClaimStatus.UNKNOWN:
            logger.warning("claim_status_unrecognized", claim_id=row.id, status=row.status)

        try:
            claimed_amount: MoneyAmount | None = MoneyAmount(row.claimed_amount)
        except InvalidAmountError:
            logger.warning("claim_amount_invalid", claim_id=row.id, claimed_amount=str(row.claimed_amount))
            claimed_amount = None

        return Claim(id=row.id, status=status, claimed_amount=claimed_amount)
