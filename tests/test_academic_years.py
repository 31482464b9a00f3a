from decimal import Decimal

from httpx import AsyncClient

from schoolhub.core.enums import Role


async def test_create_academic_year_and_scope_fee(client: AsyncClient, headers_for) -> None:
    admin = await headers_for(Role.ADMIN)
    response = await client.post(
        "/api/academic-years",
        json={"name": "2026-2027", "startDate": "2026-06-01", "endDate": "2027-03-31", "isCurrent": True},
        headers=admin,
    )
    assert response.status_code == 201
    year = response.json()["data"]
    assert year["isCurrent"] is True
    assert year["status"] == "ACTIVE"

    fee = await client.post(
        "/api/finance/structure",
        json={"name": "Tuition", "amount": "1200.50", "academicYearId": year["id"]},
        headers=admin,
    )
    assert fee.status_code == 201
    assert fee.json()["data"]["academicYearId"] == year["id"]
    assert Decimal(fee.json()["data"]["amount"]) == Decimal("1200.50")

    other = await client.post("/api/finance/structure", json={"name": "Misc", "amount": 5}, headers=admin)
    assert other.status_code == 201
    scoped = await client.get(
        "/api/finance/structure", params={"academicYearId": year["id"]}, headers=admin
    )
    assert [f["name"] for f in scoped.json()["data"]["items"]] == ["Tuition"]


async def test_only_one_current_year(client: AsyncClient, headers_for) -> None:
    admin = await headers_for(Role.ADMIN)
    for name, start, end in (("2025-2026", "2025-06-01", "2026-03-31"), ("2026-2027", "2026-06-01", "2027-03-31")):
        response = await client.post(
            "/api/academic-years",
            json={"name": name, "startDate": start, "endDate": end, "isCurrent": True},
            headers=admin,
        )
        assert response.status_code == 201

    years = (await client.get("/api/academic-years", headers=admin)).json()["data"]
    assert [(y["name"], y["isCurrent"]) for y in years] == [("2026-2027", True), ("2025-2026", False)]


async def test_academic_year_validation_and_conflict(client: AsyncClient, headers_for) -> None:
    admin = await headers_for(Role.ADMIN)
    bad = await client.post(
        "/api/academic-years",
        json={"name": "2030", "startDate": "2030-06-01", "endDate": "2030-01-01"},
        headers=admin,
    )
    assert bad.status_code == 400
    assert bad.json()["message"] == "end_date must be after start_date"

    payload = {"name": "2031", "startDate": "2031-06-01", "endDate": "2032-03-01"}
    assert (await client.post("/api/academic-years", json=payload, headers=admin)).status_code == 201
    dup = await client.post("/api/academic-years", json=payload, headers=admin)
    assert dup.status_code == 409
    assert dup.json()["success"] is False
