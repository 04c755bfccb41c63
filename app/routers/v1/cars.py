"""Car router — listing, insurance validity, claims and history.

Routers only handle HTTP (request parsing, response shaping). All business
logic delegates to :mod:`app.services.car`.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError
from app.core.pagination import PaginationParams
from app.db.base import get_db
from app.schemas.common import DataResponse, ListResponse, paginated
from app.schemas.car import CarHistoryOut, CarOut, ClaimCreate, ClaimOut, InsuranceValidityOut
from app.services.car import CarService, to_car_out

router = APIRouter(prefix="/cars", tags=["Cars"])


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise BadRequestError("Invalid date format. Use YYYY-MM-DD.") from None


@router.get("", response_model=ListResponse[CarOut])
async def list_cars(
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    """List all cars with their owner (paginated)."""
    items, total = await CarService(session).list_cars(pagination)
    return paginated(
        [to_car_out(c) for c in items],
        total, pagination.page, pagination.limit,
    )


@router.get("/{car_id}/insurance-valid", response_model=DataResponse[InsuranceValidityOut])
async def is_insurance_valid(
    car_id: str,
    on_date: str = Query(alias="date", description="Date to check (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_db),
):
    """Whether any policy of the car covers the given date."""
    parsed = _parse_date(on_date)
    valid = await CarService(session).is_insurance_valid(car_id, parsed)
    return {"data": InsuranceValidityOut(car_id=car_id, date=parsed.isoformat(), valid=valid)}


@router.post(
    "/{car_id}/claims",
    response_model=DataResponse[ClaimOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_claim(
    car_id: str,
    body: ClaimCreate,
    session: AsyncSession = Depends(get_db),
):
    """Register a claim against a car."""
    claim = await CarService(session).create_claim(car_id, body)
    return {"data": ClaimOut.model_validate(claim)}


@router.get("/{car_id}/history", response_model=DataResponse[CarHistoryOut])
async def get_car_history(
    car_id: str,
    session: AsyncSession = Depends(get_db),
):
    history = await CarService(session).get_history(car_id)
    return {"data": history}
