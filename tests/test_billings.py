from datetime import timedelta

import pytest

from hoarding_api.seed import CLIENT_ID, seed_id
from hoarding_api.utils.dates import to_iso, utcnow

FIRST_CONTRACT = seed_id("contract-1")
PENDING_INVOICE = seed_id("invoice-1")
PAID_INVOICE = seed_id("invoice-3")
OVERDUE_INVOICE = seed_id("invoice-4")


def _invoice_payload(contract_id: str = FIRST_CONTRACT, amount: float = 100000) -> dict:
    return {
        "contractId": contract_id,
        "amount": amount,
        "dueDate": to_iso(utcnow() + timedelta(days=10)),
        "notes": "First month",
    }


@pytest.mark.asyncio
async def test_contract_invoice_payment_scenario(client, auth):
    owner = await auth(client, "om@gmail.com")
    start = utcnow()
    contract = await client.post(
        "/api/contracts",
        json={
            "hoarding": seed_id("hoarding-5"),
            "client": CLIENT_ID,
            "startDate": to_iso(start),
            "endDate": to_iso(start + timedelta(days=20)),
            "totalAmount": 100000,
        },
        headers=owner,
    )
    assert contract.status_code == 201
    contract_id = contract.json()["data"]["id"]

    invoice = await client.post("/api/billings/invoice", json=_invoice_payload(contract_id), headers=owner)
    assert invoice.status_code == 201
    invoice_data = invoice.json()["data"]
    assert invoice_data["paymentStatus"] == "pending"
    assert invoice_data["clientId"] == CLIENT_ID
    assert invoice_data["invoiceNumber"] == f"INV-{utcnow().year}-0001"
    assert invoice_data["paymentDate"] is None

    payer = await auth(client, "client@gmail.com")
    paid = await client.put(
        f"/api/billings/invoice/{invoice_data['id']}",
        json={"paymentStatus": "paid"},
        headers=payer,
    )
    assert paid.status_code == 200
    assert paid.json()["data"]["paymentStatus"] == "paid"
    assert paid.json()["data"]["paymentDate"] is not None

    overdue = await client.put(
        f"/api/billings/invoice/{invoice_data['id']}",
        json={"paymentStatus": "overdue"},
        headers=payer,
    )
    assert overdue.status_code == 403


@pytest.mark.asyncio
async def test_explicit_payment_date_is_kept(client, auth):
    headers = await auth(client, "om@gmail.com")
    response = await client.put(
        f"/api/billings/invoice/{PENDING_INVOICE}",
        json={"paymentStatus": "paid", "paymentDate": "2024-01-15T10:00:00Z", "paymentMethod": "UPI"},
        headers=headers,
    )

    data = response.json()["data"]
    assert data["paymentDate"].startswith("2024-01-15T10:00:00")
    assert data["paymentMethod"] == "UPI"


@pytest.mark.asyncio
async def test_invoice_for_missing_contract_is_404(client, auth):
    headers = await auth(client, "om@gmail.com")
    response = await client.post(
        "/api/billings/invoice", json=_invoice_payload(seed_id("contract-missing")), headers=headers
    )

    assert response.status_code == 404
    listed = await client.get("/api/billings", headers=headers)
    assert len(listed.json()["data"]) == 4

    created = await client.post("/api/billings/invoice", json=_invoice_payload(), headers=headers)
    assert created.json()["data"]["invoiceNumber"] == f"INV-{utcnow().year}-0001"


@pytest.mark.asyncio
async def test_client_cannot_create_invoice(client, auth):
    headers = await auth(client, "client@gmail.com")
    response = await client.post("/api/billings/invoice", json=_invoice_payload(), headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_client_cannot_touch_other_clients_invoice(client, auth):
    headers = await auth(client, "client@gmail.com")

    read = await client.get(f"/api/billings/invoice/{PAID_INVOICE}", headers=headers)
    assert read.status_code == 403

    pay = await client.put(f"/api/billings/invoice/{OVERDUE_INVOICE}", json={"paymentStatus": "paid"}, headers=headers)
    assert pay.status_code == 403


@pytest.mark.asyncio
async def test_list_invoices_scoped_and_filtered(client, auth):
    client_headers = await auth(client, "client@gmail.com")
    own = await client.get("/api/billings", headers=client_headers)
    assert {b["clientId"] for b in own.json()["data"]} == {CLIENT_ID}
    assert len(own.json()["data"]) == 2

    owner = await auth(client, "om@gmail.com")
    overdue = await client.get("/api/billings", params={"status": "overdue"}, headers=owner)
    assert [b["id"] for b in overdue.json()["data"]] == [OVERDUE_INVOICE]

    by_contract = await client.get("/api/billings", params={"contractId": seed_id("contract-3")}, headers=owner)
    assert len(by_contract.json()["data"]) == 2


@pytest.mark.asyncio
async def test_photographer_cannot_list_invoices(client, auth):
    headers = await auth(client, "photo@gmail.com")
    response = await client.get("/api/billings", headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_analytics(client, auth):
    headers = await auth(client, "om@gmail.com")
    response = await client.get("/api/billings/analytics", headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalAmount"] == 675000
    assert data["paidAmount"] == 150000
    assert data["pendingAmount"] == 375000
    assert data["overdueAmount"] == 150000
    assert data["invoicesByStatus"] == {"pending": 2, "paid": 1, "overdue": 1, "cancelled": 0}
    assert len(data["recentInvoices"]) == 4
    assert [i["id"] for i in data["upcomingInvoices"]] == [seed_id("invoice-2"), PENDING_INVOICE]


@pytest.mark.asyncio
async def test_analytics_is_owner_only(client, auth):
    headers = await auth(client, "client@gmail.com")
    response = await client.get("/api/billings/analytics", headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_remind_pending_and_overdue_only(client, auth):
    headers = await auth(client, "om@gmail.com")

    pending = await client.post(f"/api/billings/invoice/{PENDING_INVOICE}/remind", headers=headers)
    assert pending.status_code == 200

    overdue = await client.post(f"/api/billings/invoice/{OVERDUE_INVOICE}/remind", headers=headers)
    assert overdue.status_code == 200

    paid = await client.post(f"/api/billings/invoice/{PAID_INVOICE}/remind", headers=headers)
    assert paid.status_code == 400
    assert paid.json()["message"] == "Cannot send reminder for invoice with status: paid"


@pytest.mark.asyncio
async def test_client_cannot_send_reminder(client, auth):
    headers = await auth(client, "client@gmail.com")
    response = await client.post(f"/api/billings/invoice/{PENDING_INVOICE}/remind", headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_download_invoice(client, auth):
    headers = await auth(client, "client@gmail.com")
    response = await client.get(f"/api/billings/invoice/{PENDING_INVOICE}/download", headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["invoice"]["invoiceNumber"] == "INV-2023-0001"
    assert data["contract"]["id"] == FIRST_CONTRACT
    assert data["hoarding"]["name"] == "MG Road Billboard"


@pytest.mark.asyncio
async def test_delete_invoice(client, auth):
    client_headers = await auth(client, "client@gmail.com")
    denied = await client.delete(f"/api/billings/invoice/{PENDING_INVOICE}", headers=client_headers)
    assert denied.status_code == 403

    headers = await auth(client, "om@gmail.com")
    response = await client.delete(f"/api/billings/invoice/{PENDING_INVOICE}", headers=headers)
    assert response.status_code == 200

    missing = await client.get(f"/api/billings/invoice/{PENDING_INVOICE}", headers=headers)
    assert missing.status_code == 404
