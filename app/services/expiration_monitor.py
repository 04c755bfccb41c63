"""APScheduler job that runs the policy expiration pass on a fixed interval.

Passes never overlap (``max_instances=1``). A failed pass is logged and the
job stays scheduled. ``stop()`` lets an in-flight pass finish so it never
leaves a half-written batch behind.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import ReconciliationPassFailed
from app.services.policy_expiration import PolicyExpirationService, utcnow

logger = logging.getLogger(__name__)

JOB_ID = "policy-expiration-pass"


class ExpirationMonitor:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interval_seconds: float,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_factory = session_factory
        self._interval = interval_seconds
        self._clock = clock
        self._scheduler: AsyncIOScheduler | None = None
        self._in_flight: asyncio.Task | None = None
        self.passes_run = 0
        self.passes_failed = 0

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def start(self) -> None:
        """Schedule the pass, first run immediately (call from a running event loop)."""
        if self.running:
            return
        scheduler = AsyncIOScheduler(timezone=timezone.utc)
        scheduler.add_job(
            self._tick,
            trigger=IntervalTrigger(seconds=self._interval, timezone=timezone.utc),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=None,
            next_run_time=datetime.now(timezone.utc),
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Policy expiration monitor started (interval %.0fs)", self._interval)

    async def stop(self) -> None:
        """Stop scheduling passes and wait for an in-flight one to finish."""
        scheduler = self._scheduler
        if scheduler is None:
            return
        self._scheduler = None
        scheduler.pause()
        # AsyncIOExecutor cancels running jobs on shutdown
        if self._in_flight is not None:
            await asyncio.wait({self._in_flight})
        scheduler.shutdown(wait=False)
        await asyncio.sleep(0)  # shutdown is dispatched via call_soon
        logger.info("Policy expiration monitor stopped")

    async def _tick(self) -> None:
        self._in_flight = asyncio.current_task()
        try:
            await self.run_once()
        finally:
            self._in_flight = None

    async def run_once(self) -> None:
        """Run one pass in its own session; log failures instead of raising."""
        self.passes_run += 1
        try:
            async with self._session_factory() as session:
                await PolicyExpirationService(session).run_one_pass(self._clock())
        except ReconciliationPassFailed as exc:
            self.passes_failed += 1
            logger.error("%s (%s)", exc.message, exc.code, exc_info=exc.cause)
        except Exception:
            self.passes_failed += 1
            logger.exception("Unexpected error while checking for expired policies")
