import pytest


async def _request(client, auth_headers, society_id, who="treasurer", total=10000, requested=6000):
    return await client.post(
        "/advance-payments",
        json={
            "society_id": str(society_id),
            "total_amount_needed": total,
            "requested_amount": requested,
            "remarks": "Lift repair deposit",
        },
        headers=auth_headers(who),
    )


@pytest.mark.asyncio
async def test_request_and_review(client, societies, auth_headers):
    response = await _request(client, auth_headers, societies["S1"].id)
    assert response.status_code == 201
    payment = response.json()
    assert payment["status"] == "Pending"
    assert payment["remaining"] == 10000

    response = await client.put(
        f"/advance-payments/{payment['id']}",
        json={"status": "Partially Approved", "approved_amount": 5000, "received_amount": 3000},
        headers=auth_headers("admin"),
    )
    assert response.status_code == 200
    reviewed = response.json()
    assert reviewed["status"] == "Partially Approved"
    assert reviewed["remaining"] == 5000
    assert reviewed["approved_by"] is not None


@pytest.mark.asyncio
async def test_request_bounds(client, societies, auth_headers):
    response = await _request(client, auth_headers, societies["S1"].id, total=1000, requested=1500)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "requested_amount"

    response = await _request(client, auth_headers, societies["S1"].id, total=0, requested=0)
    assert response.status_code == 400

    listed = await client.get("/advance-payments", headers=auth_headers("treasurer"))
    assert listed.json() == []


@pytest.mark.asyncio
async def test_manager_cannot_approve(client, societies, auth_headers):
    payment = (await _request(client, auth_headers, societies["S1"].id)).json()

    response = await client.put(
        f"/advance-payments/{payment['id']}",
        json={"status": "Approved", "approved_amount": 10000},
        headers=auth_headers("manager"),
    )
    assert response.status_code == 403

    response = await client.put(
        f"/advance-payments/{payment['id']}",
        json={"status": "Rejected", "remarks": "Not budgeted"},
        headers=auth_headers("manager"),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Rejected"


@pytest.mark.asyncio
async def test_agent_cannot_request(client, societies, auth_headers):
    response = await _request(client, auth_headers, societies["S2"].id, who="agent")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_and_get_scoped(client, societies, auth_headers):
    s1_payment = (await _request(client, auth_headers, societies["S1"].id)).json()
    await _request(client, auth_headers, societies["S3"].id, who="s3_treasurer")

    admin_list = (await client.get("/advance-payments", headers=auth_headers("admin"))).json()
    assert len(admin_list) == 2

    narrowed = await client.get(
        "/advance-payments", params={"society_id": str(societies["S1"].id)}, headers=auth_headers("admin")
    )
    assert [p["id"] for p in narrowed.json()] == [s1_payment["id"]]

    response = await client.get(f"/advance-payments/{s1_payment['id']}", headers=auth_headers("agent"))
    assert response.status_code == 403

    response = await client.get("/advance-payments/507f1f77bcf86cd799439011", headers=auth_headers("admin"))
    assert response.status_code == 404
