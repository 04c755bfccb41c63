"""Policy expiration reconciliation pass.

One pass loads every policy that has expired and was never recorded, keeps
the ones whose expiration is still fresh (``0 <= now - midnight(end_date) <
window``), logs a warning for each and writes one PolicyExpirationRecord per
policy in a single transaction.

Older unrecorded expirations (e.g. missed during downtime) are skipped on
purpose: the monitor is an alert, not a backfill.

Rule: No FastAPI here. The caller owns the session; this service commits it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import DataAccessError, ReconciliationPassFailed
from app.domain.policy import InsurancePolicy, PolicyExpirationRecord
from app.repositories.policy_expiration import PolicyExpirationRepository

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def expiration_instant(end_date: date) -> datetime:
    """Start of the policy's end date, in UTC."""
    return datetime.combine(end_date, time.min, tzinfo=timezone.utc)


def is_fresh_expiration(end_date: date, now: datetime, window: timedelta) -> bool:
    """True when the policy expired at most *window* ago (upper bound excluded)."""
    elapsed = now - expiration_instant(end_date)
    return timedelta(0) <= elapsed < window


@dataclass
class ReconciliationResult:
    """Summary of one pass."""

    started_at: datetime
    candidates: int = 0
    recorded: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)
    stale: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


class PolicyExpirationService:
    def __init__(self, session: AsyncSession, window: timedelta | None = None):
        self._session = session
        self._repo = PolicyExpirationRepository(session)
        if window is None:
            window = timedelta(hours=settings.expiration_window_hours)
        self._window = window

    async def run_one_pass(self, now: datetime | None = None) -> ReconciliationResult:
        """Run one reconciliation pass as of *now* (default: current UTC time).

        Raises ReconciliationPassFailed when candidates cannot be read or the
        batch cannot be written. Nothing is committed in that case.
        """
        now = now or utcnow()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        now = now.astimezone(timezone.utc)

        try:
            return await self._run(now)
        except ReconciliationPassFailed:
            raise
        except Exception as exc:
            await self._rollback()
            raise ReconciliationPassFailed(exc) from exc

    async def _run(self, now: datetime) -> ReconciliationResult:
        result = ReconciliationResult(started_at=now)
        candidates = await self._repo.list_unprocessed_expired_policies(now.date())
        result.candidates = len(candidates)

        staged: list[PolicyExpirationRecord] = []
        for policy in candidates:
            try:
                record = self._process(policy, now)
            except Exception as exc:
                logger.exception("Could not process expired policy %s", policy.id)
                result.failed[policy.id] = str(exc)
                continue
            if record is None:
                result.stale.append(policy.id)
            else:
                staged.append(record)

        recorded, duplicates = await self._repo.append_expiration_records(staged)
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            raise DataAccessError("Could not commit expiration records", operation="commit") from exc

        result.recorded = recorded
        result.duplicates = duplicates
        logger.info(
            "Expiration pass done: %d candidates, %d recorded, %d duplicates, %d stale, %d failed",
            result.candidates,
            len(result.recorded),
            len(result.duplicates),
            len(result.stale),
            len(result.failed),
        )
        return result

    def _process(self, policy: InsurancePolicy, now: datetime) -> PolicyExpirationRecord | None:
        """Stage a record for *policy* if its expiration is fresh, else return None."""
        if policy.end_date is None:
            raise ValueError("policy has no end date")
        if not is_fresh_expiration(policy.end_date, now, self._window):
            return None

        car = policy.car
        if car is None or car.owner is None:
            raise ValueError("policy is missing its car or owner")

        logger.warning(
            "Policy %s for car %s (Owner: %s) expired on %s. Provider: %s",
            policy.id,
            car.vin,
            car.owner.name,
            policy.end_date.isoformat(),
            policy.provider,
            extra={
                "policy_id": policy.id,
                "car_id": car.id,
                "car_vin": car.vin,
                "owner_name": car.owner.name,
                "expiration_date": policy.end_date.isoformat(),
                "provider": policy.provider,
            },
        )
        return PolicyExpirationRecord(
            policy_id=policy.id,
            expiration_date=policy.end_date,
            processed_at=now,
        )

    async def _rollback(self) -> None:
        try:
            await self._session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback after failed expiration pass also failed")
