"""
Demo seed data for local development.
Inserted at startup (SEED_DEMO_DATA=true) only when the owners table is empty.
Run manually: python -m app.db.seed
"""

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.car import Car
from app.domain.owner import Owner
from app.domain.policy import InsurancePolicy

logger = logging.getLogger(__name__)


SEED_OWNERS = [
    {
        "name": "Ana Pop",
        "email": "ana.pop@example.com",
        "cars": [
            {
                "vin": "VIN12345",
                "make": "Dacia",
                "model": "Logan",
                "year_of_manufacture": 2018,
                # (provider, start offset days, end offset days | None)
                "policies": [
                    ("Allianz", -450, -86),
                    ("Groupama", -85, 280),
                ],
            },
        ],
    },
    {
        "name": "Bogdan Ionescu",
        "email": "bogdan.ionescu@example.com",
        "cars": [
            {
                "vin": "VIN67890",
                "make": "VW",
                "model": "Golf",
                "year_of_manufacture": 2021,
                "policies": [("Allianz", -365, 0)],
            },
            {
                "vin": "VIN24680",
                "make": "Skoda",
                "model": "Octavia",
                "year_of_manufacture": 2020,
                "policies": [("Generali", -30, None)],
            },
        ],
    },
]


async def ensure_seeded(session: AsyncSession, today: date | None = None) -> bool:
    """Insert the demo owners, cars and policies into an empty database.

    Policy dates are relative to *today* so the expiration monitor has
    something to report. Returns True when data was inserted.
    """
    existing = (await session.execute(select(func.count()).select_from(Owner))).scalar_one()
    if existing:
        return False

    today = today or datetime.now(timezone.utc).date()
    for owner_data in SEED_OWNERS:
        owner = Owner(name=owner_data["name"], email=owner_data["email"])
        session.add(owner)
        await session.flush()
        for car_data in owner_data["cars"]:
            fields = {k: v for k, v in car_data.items() if k != "policies"}
            car = Car(owner_id=owner.id, **fields)
            session.add(car)
            await session.flush()
            for provider, start, end in car_data["policies"]:
                session.add(
                    InsurancePolicy(
                        car_id=car.id,
                        provider=provider,
                        start_date=today + timedelta(days=start),
                        end_date=None if end is None else today + timedelta(days=end),
                    )
                )
    await session.commit()
    logger.info("Seeded %d demo owners", len(SEED_OWNERS))
    return True


async def seed() -> None:
    from app.db.base import async_session_factory, create_schema

    await create_schema()
    async with async_session_factory() as session:
        await ensure_seeded(session)


if __name__ == "__main__":
    asyncio.run(seed())
