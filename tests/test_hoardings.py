import io
import json
import os

import pytest

from hoarding_api.config import settings
from hoarding_api.seed import seed_id
from hoarding_api.services.storage import resolve_stored_path
from hoarding_api.utils.dates import utcnow

FAKE_JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 100

LOCATION = {
    "address": "Linking Road",
    "city": "Mumbai",
    "state": "Maharashtra",
    "country": "India",
    "zipCode": "400050",
    "coordinates": {"latitude": 19.06, "longitude": 72.83},
}
SIZE = {"width": 20, "height": 10, "unit": "feet"}

FIRST_HOARDING = seed_id("hoarding-1")


def _form(**overrides):
    data = {
        "name": "Linking Road Unipole",
        "location": json.dumps(LOCATION),
        "size": json.dumps(SIZE),
        "dailyRate": "5000",
    }
    data.update(overrides)
    return data


async def _create(client, headers, files=None, **overrides):
    return await client.post("/api/hoardings", data=_form(**overrides), files=files, headers=headers)


@pytest.mark.asyncio
async def test_register_login_create_hoarding_scenario(client):
    register = await client.post(
        "/api/users/register",
        data={"name": "Om", "email": "om@test.com", "role": "owner", "password": "secret123"},
    )
    assert register.status_code == 201

    login = await client.post("/api/users/login", json={"email": "om@test.com", "password": "secret123"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['data']['token']}"}

    response = await _create(client, headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "active"
    assert data["hoardingNumber"] == f"H-{utcnow().year}-0001"
    assert data["dailyRate"] == 5000
    assert data["location"]["zipCode"] == "400050"
    assert data["size"] == SIZE


@pytest.mark.asyncio
async def test_hoarding_numbers_increment(client, auth):
    headers = await auth(client, "om@gmail.com")
    first = await _create(client, headers)
    second = await _create(client, headers, name="Second Board")

    year = utcnow().year
    assert first.json()["data"]["hoardingNumber"] == f"H-{year}-0001"
    assert second.json()["data"]["hoardingNumber"] == f"H-{year}-0002"


@pytest.mark.asyncio
async def test_create_with_images(client, auth):
    headers = await auth(client, "om@gmail.com")
    files = [
        ("images", ("a.jpg", io.BytesIO(FAKE_JPEG), "image/jpeg")),
        ("images", ("b.jpg", io.BytesIO(FAKE_JPEG), "image/jpeg")),
    ]
    response = await _create(client, headers, files=files)

    assert response.status_code == 201
    images = response.json()["data"]["images"]
    assert len(images) == 2
    for image in images:
        assert image.startswith("/uploads/hoardings/hoarding-")
        assert os.path.exists(resolve_stored_path(image))


@pytest.mark.asyncio
async def test_failed_create_leaves_no_image_behind(client, auth):
    headers = await auth(client, "om@gmail.com")
    folder = os.path.join(settings.upload_dir, "hoardings")
    before = set(os.listdir(folder))
    files = [("images", ("dup.png", io.BytesIO(FAKE_JPEG), "image/png"))]

    response = await _create(client, headers, files=files, hoardingNumber="H-2023-0001")

    assert response.status_code == 409
    assert set(os.listdir(folder)) == before
    listed = await client.get("/api/hoardings", headers=headers)
    assert len(listed.json()["data"]) == 5


@pytest.mark.asyncio
async def test_create_rejects_non_image(client, auth):
    headers = await auth(client, "om@gmail.com")
    files = [("images", ("notes.txt", io.BytesIO(b"hello"), "text/plain"))]
    response = await _create(client, headers, files=files)

    assert response.status_code == 400
    assert response.json()["message"] == "Only image files are allowed"


@pytest.mark.asyncio
async def test_create_rejects_bad_location(client, auth):
    headers = await auth(client, "om@gmail.com")
    response = await _create(client, headers, location=json.dumps({"city": "Mumbai"}))

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid location"


@pytest.mark.asyncio
async def test_create_rejects_non_positive_rate(client, auth):
    headers = await auth(client, "om@gmail.com")
    response = await _create(client, headers, dailyRate="0")

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("email", ["client@gmail.com", "photo@gmail.com"])
async def test_non_owner_cannot_create(client, auth, email):
    headers = await auth(client, email)
    response = await _create(client, headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_owner_sees_only_own_hoardings(client, auth):
    register = await client.post(
        "/api/users/register",
        data={"name": "Rival", "email": "rival@test.com", "role": "owner", "password": "secret123"},
    )
    rival_headers = {"Authorization": f"Bearer {register.json()['data']['token']}"}
    await _create(client, rival_headers, name="Rival Board")

    headers = await auth(client, "om@gmail.com")
    response = await client.get("/api/hoardings", headers=headers)
    names = {h["name"] for h in response.json()["data"]}
    assert "Rival Board" not in names
    assert len(names) == 5

    rival_list = await client.get("/api/hoardings", headers=rival_headers)
    assert [h["name"] for h in rival_list.json()["data"]] == ["Rival Board"]

    forbidden = await client.get(f"/api/hoardings/{FIRST_HOARDING}", headers=rival_headers)
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_client_sees_only_active_hoardings(client, auth):
    owner = await auth(client, "om@gmail.com")
    await client.put(f"/api/hoardings/{FIRST_HOARDING}", data={"status": "maintenance"}, headers=owner)

    headers = await auth(client, "client@gmail.com")
    response = await client.get("/api/hoardings", headers=headers)
    ids = {h["id"] for h in response.json()["data"]}
    assert FIRST_HOARDING not in ids
    assert len(ids) == 4

    single = await client.get(f"/api/hoardings/{FIRST_HOARDING}", headers=headers)
    assert single.status_code == 403

    by_status = await client.get("/api/hoardings/status/maintenance", headers=headers)
    assert by_status.status_code == 403

    owner_view = await client.get("/api/hoardings/status/maintenance", headers=owner)
    assert [h["id"] for h in owner_view.json()["data"]] == [FIRST_HOARDING]


@pytest.mark.asyncio
async def test_list_filters(client, auth):
    headers = await auth(client, "photo@gmail.com")

    by_city = await client.get("/api/hoardings", params={"city": "mumbai"}, headers=headers)
    assert [h["location"]["city"] for h in by_city.json()["data"]] == ["Mumbai"]

    by_price = await client.get(
        "/api/hoardings", params={"priceMin": 6000, "priceMax": 8000}, headers=headers
    )
    assert sorted(h["dailyRate"] for h in by_price.json()["data"]) == [6500, 7500]

    by_location = await client.get("/api/hoardings/location/Delhi", headers=headers)
    assert [h["name"] for h in by_location.json()["data"]] == ["Airport Hoarding"]


@pytest.mark.asyncio
async def test_update_appends_images(client, auth):
    headers = await auth(client, "om@gmail.com")
    files = [("images", ("new.jpg", io.BytesIO(FAKE_JPEG), "image/jpeg"))]
    response = await client.put(
        f"/api/hoardings/{FIRST_HOARDING}",
        data={"name": "MG Road Mega Billboard", "dailyRate": "5500"},
        files=files,
        headers=headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "MG Road Mega Billboard"
    assert data["dailyRate"] == 5500
    assert len(data["images"]) == 2
    assert data["images"][0] == "/uploads/hoardings/hoarding-1.jpg"


@pytest.mark.asyncio
async def test_photographer_cannot_update(client, auth):
    headers = await auth(client, "photo@gmail.com")
    response = await client.put(f"/api/hoardings/{FIRST_HOARDING}", data={"name": "x"}, headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_removes_image_files(client, auth):
    headers = await auth(client, "om@gmail.com")
    files = [("images", ("a.jpg", io.BytesIO(FAKE_JPEG), "image/jpeg"))]
    created = (await _create(client, headers, files=files)).json()["data"]
    image_file = resolve_stored_path(created["images"][0])
    assert os.path.exists(image_file)

    response = await client.delete(f"/api/hoardings/{created['id']}", headers=headers)

    assert response.status_code == 200
    assert not os.path.exists(image_file)
    missing = await client.get(f"/api/hoardings/{created['id']}", headers=headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_remove_single_image(client, auth):
    headers = await auth(client, "om@gmail.com")
    image_file = resolve_stored_path("/uploads/hoardings/hoarding-1.jpg")
    assert os.path.exists(image_file)

    response = await client.request(
        "DELETE",
        f"/api/hoardings/{FIRST_HOARDING}/images",
        json={"imagePath": "/uploads/hoardings/hoarding-1.jpg"},
        headers=headers,
    )

    assert response.status_code == 200
    assert response.json()["data"]["images"] == []
    assert not os.path.exists(image_file)


@pytest.mark.asyncio
async def test_remove_unknown_image_is_404(client, auth):
    headers = await auth(client, "om@gmail.com")
    response = await client.request(
        "DELETE",
        f"/api/hoardings/{FIRST_HOARDING}/images",
        json={"imagePath": "/uploads/hoardings/nope.jpg"},
        headers=headers,
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Image not found in hoarding"
