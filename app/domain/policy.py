"""SQLAlchemy ORM models for insurance policies and their expiration records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class InsurancePolicy(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Coverage period for one car. Both dates are inclusive calendar days."""

    __tablename__ = "policies"

    car_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("cars.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    # NULL = open-ended coverage (never expires)
    end_date: Mapped[Optional[date]] = mapped_column(Date, index=True, nullable=True)

    car: Mapped["Car"] = relationship(back_populates="policies", lazy="noload")
    expiration_record: Mapped[Optional["PolicyExpirationRecord"]] = relationship(
        back_populates="policy", lazy="noload", uselist=False
    )


class PolicyExpirationRecord(Base, UUIDPrimaryKeyMixin):
    """Durable marker that a policy's expiration was detected and reported.

    At most one row per policy (unique policy_id). Rows are written only by the
    expiration monitor and are never updated or deleted.
    """

    __tablename__ = "policy_expiration_records"

    policy_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("policies.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    expiration_date: Mapped[date] = mapped_column(Date, nullable=False)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    policy: Mapped["InsurancePolicy"] = relationship(
        back_populates="expiration_record", lazy="noload"
    )
