# src/rl_ledger/domain/invariants.py
"""Referential invariant check: no trip or payment may outlive its companion."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_ledger.domain.repository import LedgerRepositoryProtocol

logger = logging.getLogger(__name__)


async def verify_ledger_invariants(
    repo: LedgerRepositoryProtocol, db: AsyncSession
) -> list[str]:
    """Returns list of violation strings; empty when the ledger is consistent."""
    violations: list[str] = []
    orphan_trips, orphan_payments = await repo.count_orphans(db)

    if orphan_trips:
        violations.append(f"{orphan_trips} trip record(s) reference a missing companion")
    if orphan_payments:
        violations.append(f"{orphan_payments} payment(s) reference a missing companion")

    for msg in violations:
        logger.error("Ledger invariant violated: %s", msg)
    if not violations:
        logger.debug("Ledger invariants OK")
    return violations
