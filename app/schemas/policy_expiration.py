"""Policy expiration record and pass-summary schemas."""


from datetime import date, datetime

from app.schemas.common import CamelModel

class PolicyExpirationRecordOut(CamelModel):
    id: str
    policy_id: str
    expiration_date: date
    processed_at: datetime

class ReconciliationResultOut(CamelModel):
    started_at: datetime
    candidates: int
    recorded: list[str]
    duplicates: list[str]
    stale: list[str]
    failed: dict[str, str]
