import json

import pytest

from hoarding_api.seed import PHOTOGRAPHER_ID, seed_id


async def _bulk_hoardings(client, headers, count: int, city: str = "Pune"):
    location = {"address": "FC Road", "city": city, "state": "MH", "country": "India", "zipCode": "411004"}
    for i in range(count):
        response = await client.post(
            "/api/hoardings",
            data={
                "name": f"Bulk Board {i}",
                "location": json.dumps(location),
                "size": json.dumps({"width": 10, "height": 10}),
                "dailyRate": "1000",
            },
            headers=headers,
        )
        assert response.status_code == 201


@pytest.mark.asyncio
async def test_search_requires_auth(client):
    response = await client.get("/api/search", params={"query": "road"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_typed_search_is_capped_at_twenty(client, auth):
    headers = await auth(client, "om@gmail.com")
    await _bulk_hoardings(client, headers, 25)

    response = await client.get("/api/search", params={"query": "bulk", "type": "hoardings"}, headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert list(data) == ["hoardings"]
    assert len(data["hoardings"]) == 20


@pytest.mark.asyncio
async def test_owner_search_covers_every_type(client, auth):
    headers = await auth(client, "om@gmail.com")
    response = await client.get("/api/search", headers=headers)

    data = response.json()["data"]
    assert set(data) == {"hoardings", "contracts", "photos", "users", "assignments", "billings"}
    assert len(data["hoardings"]) == 5
    assert len(data["billings"]) == 4


@pytest.mark.asyncio
async def test_client_search_omits_assignments(client, auth):
    headers = await auth(client, "client@gmail.com")
    response = await client.get("/api/search", headers=headers)

    data = response.json()["data"]
    assert "assignments" not in data
    assert {c["clientId"] for c in data["contracts"]} == {seed_id("user-client")}


@pytest.mark.asyncio
async def test_photographer_search_is_scoped(client, auth):
    headers = await auth(client, "photo@gmail.com")
    response = await client.get("/api/search", headers=headers)

    data = response.json()["data"]
    assert "contracts" not in data
    assert "billings" not in data
    assert {a["photographerId"] for a in data["assignments"]} == {PHOTOGRAPHER_ID}
    assert {p["uploadedById"] for p in data["photos"]} == {PHOTOGRAPHER_ID}


@pytest.mark.asyncio
async def test_search_matches_text_fields_case_insensitively(client, auth):
    headers = await auth(client, "om@gmail.com")

    by_city = await client.get("/api/search", params={"query": "BANGALORE", "type": "hoardings"}, headers=headers)
    assert [h["name"] for h in by_city.json()["data"]["hoardings"]] == ["MG Road Billboard"]

    by_notes = await client.get("/api/search", params={"query": "samsung", "type": "assignments"}, headers=headers)
    assert [a["id"] for a in by_notes.json()["data"]["assignments"]] == [seed_id("assignment-2")]

    by_email = await client.get("/api/search", params={"query": "acme", "type": "users"}, headers=headers)
    assert [u["email"] for u in by_email.json()["data"]["users"]] == ["acme@gmail.com"]

    by_number = await client.get("/api/search", params={"query": "inv-2023-0003", "type": "billings"}, headers=headers)
    assert [b["id"] for b in by_number.json()["data"]["billings"]] == [seed_id("invoice-3")]


@pytest.mark.asyncio
async def test_search_filters(client, auth):
    headers = await auth(client, "om@gmail.com")

    overdue = await client.get("/api/search", params={"type": "billings", "status": "overdue"}, headers=headers)
    assert [b["id"] for b in overdue.json()["data"]["billings"]] == [seed_id("invoice-4")]

    photographers = await client.get("/api/search", params={"type": "users", "role": "photographer"}, headers=headers)
    assert len(photographers.json()["data"]["users"]) == 2

    city = await client.get("/api/search", params={"type": "hoardings", "city": "delhi"}, headers=headers)
    assert [h["name"] for h in city.json()["data"]["hoardings"]] == ["Airport Hoarding"]


@pytest.mark.asyncio
async def test_search_contracts_by_date_range(client, auth):
    headers = await auth(client, "om@gmail.com")
    response = await client.get(
        "/api/search",
        params={"type": "contracts", "dateRange": "2000-01-01,2100-01-01"},
        headers=headers,
    )
    assert len(response.json()["data"]["contracts"]) == 3

    narrow = await client.get(
        "/api/search",
        params={"type": "contracts", "dateRange": "2000-01-01,2000-12-31"},
        headers=headers,
    )
    assert narrow.json()["data"]["contracts"] == []


@pytest.mark.asyncio
async def test_search_unknown_type_is_empty(client, auth):
    headers = await auth(client, "om@gmail.com")
    response = await client.get("/api/search", params={"type": "invoices"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["data"] == {}


@pytest.mark.asyncio
async def test_public_search_needs_no_token(client):
    response = await client.get("/api/public-search", params={"query": "road"})

    assert response.status_code == 200
    names = {h["name"] for h in response.json()["data"]["hoardings"]}
    assert names == {"MG Road Billboard"}


@pytest.mark.asyncio
async def test_public_search_is_active_only_and_capped(client, auth):
    headers = await auth(client, "om@gmail.com")
    await _bulk_hoardings(client, headers, 12, city="Nashik")
    await client.put(f"/api/hoardings/{seed_id('hoarding-1')}", data={"status": "inactive"}, headers=headers)

    capped = await client.get("/api/public-search", params={"query": "nashik"})
    assert len(capped.json()["data"]["hoardings"]) == 10

    inactive = await client.get("/api/public-search", params={"query": "MG Road"})
    assert inactive.json()["data"]["hoardings"] == []


@pytest.mark.asyncio
async def test_public_search_other_types_are_empty(client):
    response = await client.get("/api/public-search", params={"type": "users"})

    assert response.json()["data"] == {}
