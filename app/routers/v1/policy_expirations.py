"""Policy expiration router — read the expiration log, trigger a pass on demand."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import PaginationParams
from app.db.base import get_db
from app.schemas.common import DataResponse, ListResponse, paginated
from app.repositories.policy_expiration import PolicyExpirationRepository
from app.schemas.policy_expiration import PolicyExpirationRecordOut, ReconciliationResultOut
from app.services.policy_expiration import PolicyExpirationService

router = APIRouter(prefix="/policy-expirations", tags=["Policy expirations"])


@router.get("", response_model=ListResponse[PolicyExpirationRecordOut])
async def list_policy_expirations(
    pagination: PaginationParams = Depends(PaginationParams.sorted_by("processed_at")),
    session: AsyncSession = Depends(get_db),
):
    """List recorded policy expirations, newest first by default."""
    items, total = await PolicyExpirationRepository(session).list(
        offset=pagination.offset,
        limit=pagination.limit,
        order_by=pagination.sort,
        order=pagination.order,
    )
    return paginated(
        [PolicyExpirationRecordOut.model_validate(r) for r in items],
        total, pagination.page, pagination.limit,
    )


@router.post("/run", response_model=DataResponse[ReconciliationResultOut])
async def run_policy_expiration_pass(session: AsyncSession = Depends(get_db)):
    """Run one reconciliation pass now and return its summary."""
    result = await PolicyExpirationService(session).run_one_pass()
    return {"data": ReconciliationResultOut(**asdict(result))}
