"""Car, claim and policy lookups used by the car endpoints."""

from __future__ import annotations

from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from app.domain.car import Car, Claim
from app.domain.policy import InsurancePolicy
from app.repositories.base import BaseRepository


class CarRepository(BaseRepository[Car]):
    model = Car

    def _base_query(self):
        # Car listings always show the owner
        return select(Car).options(selectinload(Car.owner))

    async def has_valid_policy(self, car_id: str, on_date: date) -> bool:
        """True when any policy of the car covers *on_date* (open-ended end dates count)."""
        q = (
            select(InsurancePolicy.id)
            .where(InsurancePolicy.car_id == car_id)
            .where(InsurancePolicy.start_date <= on_date)
            .where(
                or_(
                    InsurancePolicy.end_date.is_(None),
                    InsurancePolicy.end_date >= on_date,
                )
            )
            .limit(1)
        )
        return (await self._session.execute(q)).first() is not None

    async def list_policies(self, car_id: str) -> list[InsurancePolicy]:
        q = (
            select(InsurancePolicy)
            .where(InsurancePolicy.car_id == car_id)
            .order_by(InsurancePolicy.start_date, InsurancePolicy.id)
        )
        return list((await self._session.execute(q)).scalars().all())


class ClaimRepository(BaseRepository[Claim]):
    model = Claim

    async def list_for_car(self, car_id: str) -> list[Claim]:
        q = (
            select(Claim)
            .where(Claim.car_id == car_id)
            .order_by(Claim.claim_date, Claim.id)
        )
        return list((await self._session.execute(q)).scalars().all())
