"""SQLAlchemy ORM models for cars and their claims."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class Car(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "cars"

    vin: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    make: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    year_of_manufacture: Mapped[int] = mapped_column(Integer, nullable=False)

    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True
    )

    owner: Mapped["Owner"] = relationship(back_populates="cars", lazy="noload")
    policies: Mapped[List["InsurancePolicy"]] = relationship(
        back_populates="car", lazy="noload"
    )
    claims: Mapped[List["Claim"]] = relationship(back_populates="car", lazy="noload")


class Claim(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One insurance claim filed against a car."""

    __tablename__ = "claims"

    car_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("cars.id", ondelete="CASCADE"), nullable=False, index=True
    )
    claim_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    car: Mapped["Car"] = relationship(back_populates="claims", lazy="noload")
