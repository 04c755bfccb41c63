"""Initial schema — owners, cars, policies, claims, policy_expiration_records.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "owners",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_owners_name", "owners", ["name"])
    op.create_index("ix_owners_email", "owners", ["email"])

    op.create_table(
        "cars",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("vin", sa.String(32), nullable=False),
        sa.Column("make", sa.String(100), nullable=True),
        sa.Column("model", sa.String(100), nullable=True),
        sa.Column("year_of_manufacture", sa.Integer, nullable=False),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("owners.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_cars_vin", "cars", ["vin"], unique=True)
    op.create_index("ix_cars_owner_id", "cars", ["owner_id"])

    op.create_table(
        "policies",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("car_id", sa.String(36), sa.ForeignKey("cars.id", ondelete="CASCADE"), nullable=False),
        sa.Column("provider", sa.String(255), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_policies_car_id", "policies", ["car_id"])
    op.create_index("ix_policies_end_date", "policies", ["end_date"])

    op.create_table(
        "claims",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("car_id", sa.String(36), sa.ForeignKey("cars.id", ondelete="CASCADE"), nullable=False),
        sa.Column("claim_date", sa.Date, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_claims_car_id", "claims", ["car_id"])
    op.create_index("ix_claims_claim_date", "claims", ["claim_date"])

    op.create_table(
        "policy_expiration_records",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("policy_id", sa.String(36), sa.ForeignKey("policies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("expiration_date", sa.Date, nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=False),
    )
    # One record per policy, ever
    op.create_index(
        "ix_policy_expiration_records_policy_id",
        "policy_expiration_records",
        ["policy_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_table("policy_expiration_records")
    op.drop_table("claims")
    op.drop_table("policies")
    op.drop_table("cars")
    op.drop_table("owners")
