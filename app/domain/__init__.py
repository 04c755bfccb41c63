"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  owner.py   — Car owners
  car.py     — Cars and the claims filed against them
  policy.py  — Insurance policies and their expiration records (append-only)
  mixins.py  — Shared UUIDPrimaryKeyMixin, TimestampMixin
"""

from app.domain.car import Car, Claim
from app.domain.owner import Owner
from app.domain.policy import InsurancePolicy, PolicyExpirationRecord

__all__ = [
    "Car",
    "Claim",
    "InsurancePolicy",
    "Owner",
    "PolicyExpirationRecord",
]
