"""Policy expiration endpoints — expiration log and on-demand pass."""

from datetime import datetime, timedelta, timezone

from app.core.exceptions import DataAccessError
from app.domain.policy import PolicyExpirationRecord
from app.repositories.policy_expiration import PolicyExpirationRepository


def _today():
    return datetime.now(timezone.utc).date()


async def test_run_pass_records_policy_expiring_today(client, make_policy):
    policy = await make_policy(end_date=_today())

    res = await client.post("/api/v1/policy-expirations/run")

    assert res.status_code == 200
    summary = res.json()["data"]
    assert summary["candidates"] == 1
    assert summary["recorded"] == [policy.id]
    assert summary["failed"] == {}

    res = await client.get("/api/v1/policy-expirations")
    body = res.json()
    assert body["meta"]["total"] == 1
    [record] = body["data"]
    assert record["policyId"] == policy.id
    assert record["expirationDate"] == _today().isoformat()


async def test_run_pass_twice_is_idempotent(client, make_policy):
    await make_policy(end_date=_today())

    await client.post("/api/v1/policy-expirations/run")
    res = await client.post("/api/v1/policy-expirations/run")

    assert res.json()["data"]["recorded"] == []
    res = await client.get("/api/v1/policy-expirations")
    assert res.json()["meta"]["total"] == 1


async def test_run_pass_skips_stale_expiration(client, make_policy):
    policy = await make_policy(end_date=_today() - timedelta(days=2))

    res = await client.post("/api/v1/policy-expirations/run")

    assert res.json()["data"]["stale"] == [policy.id]


async def test_list_is_newest_first(client, test_db, make_car, make_policy):
    older = await make_policy(end_date=_today(), car=await make_car(vin="A1"))
    newer = await make_policy(end_date=_today(), car=await make_car(vin="B2"))
    now = datetime.now(timezone.utc)
    test_db.add_all([
        PolicyExpirationRecord(
            policy_id=older.id, expiration_date=_today(), processed_at=now - timedelta(hours=1),
        ),
        PolicyExpirationRecord(policy_id=newer.id, expiration_date=_today(), processed_at=now),
    ])
    await test_db.commit()

    res = await client.get("/api/v1/policy-expirations")

    assert [r["policyId"] for r in res.json()["data"]] == [newer.id, older.id]


async def test_run_pass_failure_returns_error_envelope(client, make_policy, monkeypatch):
    await make_policy(end_date=_today())

    async def broken_read(self, as_of):
        raise DataAccessError("database is locked", operation="select")

    monkeypatch.setattr(
        PolicyExpirationRepository, "list_unprocessed_expired_policies", broken_read,
    )

    res = await client.post("/api/v1/policy-expirations/run")

    assert res.status_code == 500
    assert res.json()["error"]["code"] == "RECONCILIATION_PASS_FAILED"


async def test_run_pass_wraps_driver_errors(client, make_policy, monkeypatch):
    await make_policy(end_date=_today())

    async def dropped_connection(self, as_of):
        raise ConnectionResetError("socket closed")

    monkeypatch.setattr(
        PolicyExpirationRepository, "list_unprocessed_expired_policies", dropped_connection,
    )

    res = await client.post("/api/v1/policy-expirations/run")

    assert res.status_code == 500
    assert res.json()["error"]["code"] == "RECONCILIATION_PASS_FAILED"
