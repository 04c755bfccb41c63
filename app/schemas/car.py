"""Car, claim and history Pydantic schemas (request DTOs and response models)."""


from datetime import date
from decimal import Decimal

from pydantic import Field

from app.schemas.common import CamelModel

class CarOut(CamelModel):
    id: str
    vin: str
    make: str | None = None
    model: str | None = None
    year_of_manufacture: int
    owner_id: str
    owner_name: str
    owner_email: str | None = None

class InsuranceValidityOut(CamelModel):
    car_id: str
    date: str  # YYYY-MM-DD
    valid: bool

class ClaimCreate(CamelModel):
    claim_date: date
    description: str = Field(min_length=1, max_length=2000)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)

class ClaimOut(CamelModel):
    id: str
    car_id: str
    claim_date: date
    description: str
    amount: Decimal

class ClaimSummary(CamelModel):
    id: str
    claim_date: date
    description: str
    amount: Decimal

class PolicyPeriodOut(CamelModel):
    policy_id: str
    provider: str
    start_date: date
    end_date: date | None = None
    claims: list[ClaimSummary] = Field(default_factory=list)

class CarHistoryOut(CamelModel):
    car_id: str
    policies: list[PolicyPeriodOut] = Field(default_factory=list)
