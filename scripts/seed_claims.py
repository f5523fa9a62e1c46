#!/usr/bin/env python3
"""Seed sample claims for local development and the e2e suite.

Claims belong to the claims system; this script only inserts a few fixed
rows so payments can be recorded against them locally.
"""
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import structlog
from sqlalchemy import text

from claim_payments.config import settings
from claim_payments.domain.models import ClaimStatus
from claim_payments.infrastructure.database import Database
from claim_payments.logging import configure_logging


logger = structlog.get_logger()


SAMPLE_CLAIMS = [
    (1, ClaimStatus.APPROVED, Decimal("10000.00")),
    (2, ClaimStatus.SUBMITTED, Decimal("2500.00")),
    (3, ClaimStatus.APPROVED, Decimal("750.50")),
    (4, ClaimStatus.REJECTED, Decimal("1200.00")),
]


async def main() -> None:
    configure_logging(level=settings.log_level, log_format="console")

    database = Database(settings.database_url)
    try:
        async with database.session() as session:
            for claim_id, status, claimed_amount in SAMPLE_CLAIMS:
                await session.execute(
                    text("""
                        INSERT INTO claims (id, status, claimed_amount)
                        VALUES (:id, :status, :claimed_amount)
                        ON CONFLICT (id) DO UPDATE
                        SET status = EXCLUDED.status,
                            claimed_amount = EXCLUDED.claimed_amount
                    """),
                    {"id": claim_id, "status": status.value, "claimed_amount": claimed_amount},
                )
                logger.info("claim_seeded", claim_id=claim_id, status=status.value, claimed_amount=str(claimed_amount))
            await session.commit()
    finally:
        await database.close()


if __name__ == "__main__":
    asyncio.run(main())
