"""SQLAlchemy ORM model for car owners."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class Owner(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "owners"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), index=True, nullable=True)

    cars: Mapped[List["Car"]] = relationship(back_populates="owner", lazy="noload")
