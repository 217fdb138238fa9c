from datetime import datetime, timedelta, timezone

import pytest


async def _create_bill(client, auth_headers, society_id, amount, who="treasurer"):
    response = await client.post(
        "/bills",
        json={
            "society_id": str(society_id),
            "vendor_name": "Acme Plumbing",
            "transaction_nature": "Repairs",
            "amount": amount,
            "due_date": (datetime.now(timezone.utc) + timedelta(days=3)).isoformat(),
        },
        headers=auth_headers(who),
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.asyncio
async def test_summary_counts(client, societies, auth_headers):
    bill_id = await _create_bill(client, auth_headers, societies["S1"].id, 100)
    await _create_bill(client, auth_headers, societies["S1"].id, 200)
    await client.put(f"/bills/{bill_id}/status", json={"status": "Approved"}, headers=auth_headers("president"))

    response = await client.get("/reports", headers=auth_headers("manager"))
    assert response.status_code == 200
    assert response.json() == {"pending": 1, "approved": 1}

    response = await client.get("/reports", headers=auth_headers("agent"))
    assert response.json() == {"pending": 0, "approved": 0}


@pytest.mark.asyncio
async def test_expense_report(client, societies, auth_headers):
    await _create_bill(client, auth_headers, societies["S1"].id, 100)
    await _create_bill(client, auth_headers, societies["S2"].id, 300, who="admin")

    response = await client.get("/reports/expense", headers=auth_headers("admin"))
    assert response.status_code == 200
    report = response.json()
    assert report["summary"] == {"total_amount": 400, "total_bills": 2, "average_amount": 200}
    assert report["by_status"] == {"Pending": 400}
    assert report["by_society"] == {"Society S1": 100, "Society S2": 300}
    assert len(report["bills"]) == 2
    assert report["date_range"] == {"start_date": None, "end_date": None}

    response = await client.get(
        "/reports/expense", params={"status": "Approved"}, headers=auth_headers("admin")
    )
    assert response.json()["summary"]["total_bills"] == 0


@pytest.mark.asyncio
async def test_expense_report_requires_auth(client):
    assert (await client.get("/reports/expense")).status_code == 401
