from conftest import create_fee


def submit(client, fee_id, headers, transaction_id="TX-100", amount="50.00"):
    return client.post(
        f"/api/fees/{fee_id}/pay-request",
        json={"transaction_id": transaction_id, "payee_name": "Alice Smith", "amount": amount},
        headers=headers,
    )


def test_owner_submits_request_without_paying_fee(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"])
    res = submit(client, fee["id"], alice["headers"])
    assert res.status_code == 200
    assert res.json()["message"] == "Payment request submitted for approval"

    stored = client.get(f"/api/fees/{fee['id']}", headers=alice["headers"]).json()
    assert stored["paid"] is False
    assert stored["payment_date"] is None

    requests = client.get("/api/payrequests", headers=admin_headers).json()
    assert len(requests) == 1
    assert requests[0]["approved"] is False
    assert requests[0]["approved_at"] is None
    assert requests[0]["user"]["username"] == "alice"
    assert requests[0]["fee_paid"] is False


def test_submit_validation_and_access(client, admin_headers, alice, bob):
    fee = create_fee(client, admin_headers, alice["id"])
    assert submit(client, fee["id"], bob["headers"]).status_code == 403
    assert submit(client, 4242, alice["headers"]).status_code == 404
    assert submit(client, fee["id"], alice["headers"], amount="0").status_code == 422
    missing = client.post(
        f"/api/fees/{fee['id']}/pay-request", json={"payee_name": "A"}, headers=alice["headers"]
    )
    assert missing.status_code == 422


def test_approval_marks_fee_paid(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"])
    request_id = submit(client, fee["id"], alice["headers"]).json()["id"]

    res = client.post(f"/api/payrequests/{request_id}/approve", headers=admin_headers)
    assert res.status_code == 200

    stored = client.get(f"/api/fees/{fee['id']}", headers=alice["headers"]).json()
    assert stored["paid"] is True
    assert stored["payment_date"] is not None

    listed = client.get("/api/payrequests", headers=admin_headers).json()[0]
    assert listed["approved"] is True
    assert listed["approved_at"] is not None


def test_second_approval_is_rejected(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"])
    request_id = submit(client, fee["id"], alice["headers"]).json()["id"]
    client.post(f"/api/payrequests/{request_id}/approve", headers=admin_headers)
    after_first = client.get(f"/api/fees/{fee['id']}", headers=admin_headers).json()

    again = client.post(f"/api/payrequests/{request_id}/approve", headers=admin_headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Already approved"
    assert client.get(f"/api/fees/{fee['id']}", headers=admin_headers).json() == after_first


def test_approving_missing_request(client, admin_headers):
    res = client.post("/api/payrequests/999/approve", headers=admin_headers)
    assert res.status_code == 404


def test_approval_keeps_existing_payment_date(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"])
    request_id = submit(client, fee["id"], alice["headers"]).json()["id"]
    paid = client.put(
        f"/api/fees/{fee['id']}/pay",
        json={"payment_date": "2025-01-15T10:00:00"},
        headers=admin_headers,
    ).json()

    assert client.post(f"/api/payrequests/{request_id}/approve", headers=admin_headers).status_code == 200
    stored = client.get(f"/api/fees/{fee['id']}", headers=admin_headers).json()
    assert stored["payment_date"] == paid["payment_date"]


def test_payrequests_are_admin_only(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"])
    request_id = submit(client, fee["id"], alice["headers"]).json()["id"]
    assert client.get("/api/payrequests", headers=alice["headers"]).status_code == 403
    res = client.post(f"/api/payrequests/{request_id}/approve", headers=alice["headers"])
    assert res.status_code == 403


def test_deleting_fee_removes_its_requests(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"])
    submit(client, fee["id"], alice["headers"])
    client.delete(f"/api/fees/{fee['id']}", headers=admin_headers)
    assert client.get("/api/payrequests", headers=admin_headers).json() == []
