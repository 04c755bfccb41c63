"""Data access for the policy expiration monitor.

Two operations only: read the policies that expired and were never recorded,
and append expiration records. The unique constraint on
``policy_expiration_records.policy_id`` is what guarantees one record per
policy; inserts that hit it are reported as :class:`DuplicateRecordError`
instead of failing the transaction.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from app.core.exceptions import DataAccessError, DuplicateRecordError
from app.domain.car import Car
from app.domain.policy import InsurancePolicy, PolicyExpirationRecord
from app.domain.mixins import new_id
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


class PolicyExpirationRepository(BaseRepository[PolicyExpirationRecord]):
    model = PolicyExpirationRecord

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def list_unprocessed_expired_policies(self, as_of: date) -> list[InsurancePolicy]:
        """Policies with ``end_date <= as_of`` and no expiration record yet.

        ``policy.car`` and ``policy.car.owner`` are loaded in the same query.
        Open-ended policies (NULL end date) are never candidates.
        """
        already_recorded = (
            select(PolicyExpirationRecord.id)
            .where(PolicyExpirationRecord.policy_id == InsurancePolicy.id)
            .exists()
        )
        q = (
            select(InsurancePolicy)
            .options(joinedload(InsurancePolicy.car).joinedload(Car.owner))
            .where(InsurancePolicy.end_date.is_not(None))
            .where(InsurancePolicy.end_date <= as_of)
            .where(~already_recorded)
            .order_by(InsurancePolicy.id)
        )
        try:
            result = await self._session.execute(q)
        except SQLAlchemyError as exc:
            raise DataAccessError(
                "Could not load expired policies", operation="select"
            ) from exc
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def _is_recorded(self, policy_id: str) -> bool:
        q = select(PolicyExpirationRecord.id).where(PolicyExpirationRecord.policy_id == policy_id)
        return (await self._session.execute(q)).first() is not None

    async def _upsert(self, dialect_insert, values: dict[str, Any]) -> bool:
        stmt = (
            dialect_insert(PolicyExpirationRecord.__table__)
            .values(**values)
            .on_conflict_do_nothing(index_elements=["policy_id"])
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def _insert_in_savepoint(self, values: dict[str, Any]) -> bool:
        """Plain INSERT for dialects without ON CONFLICT (e.g. mssql).

        A unique violation on ``policy_id`` only rolls back its savepoint,
        so the rest of the batch survives.
        """
        try:
            async with self._session.begin_nested():
                await self._session.execute(
                    insert(PolicyExpirationRecord.__table__).values(**values)
                )
        except IntegrityError:
            if not await self._is_recorded(values["policy_id"]):
                raise
            return False
        return True

    async def insert_expiration_record(self, record: PolicyExpirationRecord) -> None:
        """Insert one record; raise DuplicateRecordError if the policy is already recorded."""
        values = {
            "id": record.id or new_id(),
            "policy_id": record.policy_id,
            "expiration_date": record.expiration_date,
            "processed_at": record.processed_at,
        }
        dialect_insert = _UPSERT_DIALECTS.get(self._session.get_bind().dialect.name)
        try:
            if dialect_insert is None:
                inserted = await self._insert_in_savepoint(values)
            else:
                inserted = await self._upsert(dialect_insert, values)
        except SQLAlchemyError as exc:
            raise DataAccessError(
                f"Could not record expiration of policy '{record.policy_id}'",
                operation="insert",
            ) from exc
        if not inserted:
            raise DuplicateRecordError(record.policy_id)
        record.id = values["id"]

    async def append_expiration_records(
        self, records: list[PolicyExpirationRecord]
    ) -> tuple[list[str], list[str]]:
        """Insert *records* in the current transaction.

        Returns ``(recorded_policy_ids, duplicate_policy_ids)``. The caller
        commits; any DataAccessError leaves the whole batch uncommitted.
        """
        recorded: list[str] = []
        duplicates: list[str] = []
        for record in records:
            try:
                await self.insert_expiration_record(record)
            except DuplicateRecordError as exc:
                logger.info("Skipping policy %s: %s", exc.policy_id, exc.message)
                duplicates.append(exc.policy_id)
                continue
            recorded.append(record.policy_id)
        return recorded, duplicates
