"""Car service — listing, insurance validity, claims and history.

Rule: No FastAPI here. Pure Python business logic over the repositories.
"""


from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.pagination import PaginationParams
from app.domain.car import Car, Claim
from app.repositories.car import CarRepository, ClaimRepository
from app.schemas.car import (
    CarHistoryOut,
    CarOut,
    ClaimCreate,
    ClaimSummary,
    PolicyPeriodOut,
)


def to_car_out(car: Car) -> CarOut:
    return CarOut(
        id=car.id,
        vin=car.vin,
        make=car.make,
        model=car.model,
        year_of_manufacture=car.year_of_manufacture,
        owner_id=car.owner_id,
        owner_name=car.owner.name,
        owner_email=car.owner.email,
    )


class CarService:
    def __init__(self, session: AsyncSession):
        self._cars = CarRepository(session)
        self._claims = ClaimRepository(session)

    async def _ensure_car(self, car_id: str) -> None:
        if not await self._cars.exists(car_id):
            raise NotFoundError("Car", car_id)

    async def list_cars(self, pagination: PaginationParams) -> tuple[list[Car], int]:
        return await self._cars.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
        )

    async def is_insurance_valid(self, car_id: str, on_date: date) -> bool:
        await self._ensure_car(car_id)
        return await self._cars.has_valid_policy(car_id, on_date)

    async def create_claim(self, car_id: str, data: ClaimCreate) -> Claim:
        await self._ensure_car(car_id)
        return await self._claims.create(car_id=car_id, **data.model_dump())

    async def get_history(self, car_id: str) -> CarHistoryOut:
        """Policies ordered by start date, each with the claims dated inside its period."""
        await self._ensure_car(car_id)
        policies = await self._cars.list_policies(car_id)
        claims = await self._claims.list_for_car(car_id)

        periods = []
        for policy in policies:
            in_period = [
                ClaimSummary.model_validate(c)
                for c in claims
                if c.claim_date >= policy.start_date
                and (policy.end_date is None or c.claim_date <= policy.end_date)
            ]
            periods.append(
                PolicyPeriodOut(
                    policy_id=policy.id,
                    provider=policy.provider,
                    start_date=policy.start_date,
                    end_date=policy.end_date,
                    claims=in_period,
                )
            )
        return CarHistoryOut(car_id=car_id, policies=periods)
