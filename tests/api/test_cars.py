"""Car endpoints — listing, insurance validity, claims, history."""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

TODAY = date(2026, 3, 15)


@pytest.fixture
async def insured_car(make_policy, make_car):
    car = await make_car(vin="TEST123")
    await make_policy(
        end_date=TODAY + timedelta(days=30),
        start_date=TODAY - timedelta(days=30),
        car=car,
        provider="TestInsurance",
    )
    return car


async def test_health(client):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


async def test_list_cars_includes_owner(client, make_owner, make_car):
    owner = await make_owner(name="Ana Pop", email="ana@example.com")
    car = await make_car(vin="VIN1", owner=owner)

    res = await client.get("/api/v1/cars")

    assert res.status_code == 200
    body = res.json()
    assert body["meta"]["total"] == 1
    [item] = body["data"]
    assert item["id"] == car.id
    assert item["vin"] == "VIN1"
    assert item["ownerName"] == "Ana Pop"
    assert item["ownerEmail"] == "ana@example.com"


async def test_list_cars_paginates(client, make_owner, make_car):
    owner = await make_owner()
    for i in range(3):
        await make_car(vin=f"VIN{i}", owner=owner)

    res = await client.get("/api/v1/cars", params={"page": 2, "limit": 2})

    body = res.json()
    assert body["meta"] == {"total": 3, "page": 2, "limit": 2, "pages": 2}
    assert len(body["data"]) == 1


@pytest.mark.parametrize(
    "offset_days, expected",
    [(0, True), (-30, True), (30, True), (-31, False), (31, False)],
)
async def test_insurance_validity(client, insured_car, offset_days, expected):
    on = TODAY + timedelta(days=offset_days)

    res = await client.get(
        f"/api/v1/cars/{insured_car.id}/insurance-valid", params={"date": on.isoformat()},
    )

    assert res.status_code == 200
    assert res.json()["data"] == {
        "carId": insured_car.id, "date": on.isoformat(), "valid": expected,
    }


async def test_open_ended_policy_is_valid_forever(client, make_car, make_policy):
    car = await make_car()
    await make_policy(end_date=None, start_date=TODAY, car=car)

    res = await client.get(
        f"/api/v1/cars/{car.id}/insurance-valid", params={"date": "2099-01-01"},
    )

    assert res.json()["data"]["valid"] is True


async def test_insurance_validity_rejects_bad_date(client, insured_car):
    res = await client.get(
        f"/api/v1/cars/{insured_car.id}/insurance-valid", params={"date": "15/03/2026"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "BAD_REQUEST"


async def test_insurance_validity_unknown_car(client):
    res = await client.get(
        f"/api/v1/cars/{uuid4()}/insurance-valid", params={"date": TODAY.isoformat()},
    )
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "NOT_FOUND"


async def test_create_claim(client, insured_car):
    res = await client.post(
        f"/api/v1/cars/{insured_car.id}/claims",
        json={"claimDate": TODAY.isoformat(), "description": "Rear bumper", "amount": 150.5},
    )

    assert res.status_code == 201
    data = res.json()["data"]
    assert data["carId"] == insured_car.id
    assert data["claimDate"] == TODAY.isoformat()
    assert Decimal(str(data["amount"])) == Decimal("150.50")


async def test_create_claim_rejects_non_positive_amount(client, insured_car):
    res = await client.post(
        f"/api/v1/cars/{insured_car.id}/claims",
        json={"claimDate": TODAY.isoformat(), "description": "Scratch", "amount": 0},
    )
    assert res.status_code == 422


async def test_create_claim_unknown_car(client):
    res = await client.post(
        f"/api/v1/cars/{uuid4()}/claims",
        json={"claimDate": TODAY.isoformat(), "description": "Scratch", "amount": 10},
    )
    assert res.status_code == 404


async def test_history_groups_claims_by_policy_period(client, make_car, make_policy):
    car = await make_car()
    old = await make_policy(
        start_date=date(2025, 1, 1), end_date=date(2025, 12, 31), car=car, provider="Allianz",
    )
    current = await make_policy(
        start_date=date(2026, 1, 1), end_date=None, car=car, provider="Groupama",
    )
    for claim_date, description in [
        ("2026-02-01", "Hail"),
        ("2025-06-01", "Mirror"),
        ("2025-12-31", "Door"),
    ]:
        res = await client.post(
            f"/api/v1/cars/{car.id}/claims",
            json={"claimDate": claim_date, "description": description, "amount": 100},
        )
        assert res.status_code == 201

    res = await client.get(f"/api/v1/cars/{car.id}/history")

    assert res.status_code == 200
    history = res.json()["data"]
    assert history["carId"] == car.id
    assert [p["policyId"] for p in history["policies"]] == [old.id, current.id]
    assert [c["description"] for c in history["policies"][0]["claims"]] == ["Mirror", "Door"]
    assert [c["description"] for c in history["policies"][1]["claims"]] == ["Hail"]
    assert history["policies"][1]["endDate"] is None


async def test_history_unknown_car(client):
    res = await client.get(f"/api/v1/cars/{uuid4()}/history")
    assert res.status_code == 404


@pytest.mark.parametrize("sort", ["owner", "metadata", "no_such_column"])
async def test_list_cars_rejects_unknown_sort_field(client, make_car, sort):
    await make_car()

    res = await client.get("/api/v1/cars", params={"sort": sort})

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "BAD_REQUEST"
