"""Demo seed data — inserted once, usable by the expiration monitor."""

from datetime import date, datetime, timezone

from sqlalchemy import func, select

from app.db.seed import SEED_OWNERS, ensure_seeded
from app.domain.car import Car
from app.domain.owner import Owner
from app.services.policy_expiration import PolicyExpirationService

TODAY = date(2026, 3, 15)


async def _count(session, model):
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def test_seeds_empty_database_once(test_db):
    assert await ensure_seeded(test_db, today=TODAY) is True
    assert await ensure_seeded(test_db, today=TODAY) is False

    assert await _count(test_db, Owner) == len(SEED_OWNERS)
    assert await _count(test_db, Car) == sum(len(o["cars"]) for o in SEED_OWNERS)


async def test_seeded_policy_expiring_today_is_recorded(test_db):
    await ensure_seeded(test_db, today=TODAY)
    now = datetime(2026, 3, 15, 8, 0, tzinfo=timezone.utc)

    result = await PolicyExpirationService(test_db).run_one_pass(now)

    # Only the Golf policy ends today; the Logan's old policy is long expired
    assert len(result.recorded) == 1
    assert len(result.stale) == 1
