from datetime import datetime, timedelta

from conftest import create_fee, money


def test_admin_creates_fee(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"], amount="49.99", description="Fiber 100")
    assert fee["user_id"] == alice["id"]
    assert fee["username"] == "alice"
    assert money(fee["amount"]) == money("49.99")
    assert fee["paid"] is False
    assert fee["payment_date"] is None
    assert fee["description"] == "Fiber 100"


def test_create_fee_requires_existing_user(client, admin_headers):
    res = client.post(
        "/api/fees",
        json={"user_id": 999, "amount": "10.00", "due_date": datetime.utcnow().isoformat()},
        headers=admin_headers,
    )
    assert res.status_code == 404
    assert res.json()["detail"] == "User not found"


def test_create_fee_rejects_non_positive_amount(client, admin_headers, alice):
    for amount in ("0", "-5.00"):
        res = client.post(
            "/api/fees",
            json={"user_id": alice["id"], "amount": amount, "due_date": datetime.utcnow().isoformat()},
            headers=admin_headers,
        )
        assert res.status_code == 422


def test_clients_cannot_create_or_list_all_fees(client, alice):
    assert client.get("/api/fees", headers=alice["headers"]).status_code == 403
    res = client.post(
        "/api/fees",
        json={"user_id": alice["id"], "amount": "10.00", "due_date": datetime.utcnow().isoformat()},
        headers=alice["headers"],
    )
    assert res.status_code == 403


def test_fee_visibility_by_owner(client, admin_headers, alice, bob):
    alice_fee = create_fee(client, admin_headers, alice["id"])
    bob_fee = create_fee(client, admin_headers, bob["id"])

    own = client.get(f"/api/fees/{alice_fee['id']}", headers=alice["headers"])
    other = client.get(f"/api/fees/{bob_fee['id']}", headers=alice["headers"])
    assert own.status_code == 200
    assert other.status_code == 403
    assert client.get(f"/api/fees/{bob_fee['id']}", headers=admin_headers).status_code == 200
    assert client.get("/api/fees/12345", headers=admin_headers).status_code == 404

    mine = client.get("/api/fees/my-fees", headers=alice["headers"])
    assert [f["id"] for f in mine.json()] == [alice_fee["id"]]

    assert client.get(f"/api/fees/user/{bob['id']}", headers=alice["headers"]).status_code == 403
    by_user = client.get(f"/api/fees/user/{bob['id']}", headers=admin_headers)
    assert [f["id"] for f in by_user.json()] == [bob_fee["id"]]

    all_fees = client.get("/api/fees", headers=admin_headers)
    assert len(all_fees.json()) == 2


def test_mark_paid_sets_payment_date(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"])
    res = client.put(f"/api/fees/{fee['id']}/pay", headers=alice["headers"])
    assert res.status_code == 200
    body = res.json()
    assert body["paid"] is True
    assert body["payment_date"] is not None


def test_mark_paid_with_supplied_date(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"])
    res = client.put(
        f"/api/fees/{fee['id']}/pay",
        json={"payment_date": "2025-03-10T08:00:00"},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["payment_date"].startswith("2025-03-10T08:00:00")


def test_mark_paid_twice_is_rejected_and_date_kept(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"])
    first = client.put(
        f"/api/fees/{fee['id']}/pay",
        json={"payment_date": "2025-03-10T08:00:00"},
        headers=admin_headers,
    )
    second = client.put(
        f"/api/fees/{fee['id']}/pay",
        json={"payment_date": "2025-04-01T08:00:00"},
        headers=admin_headers,
    )
    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["detail"] == "Fee is already paid"

    stored = client.get(f"/api/fees/{fee['id']}", headers=admin_headers).json()
    assert stored["payment_date"] == first.json()["payment_date"]


def test_client_cannot_pay_someone_elses_fee(client, admin_headers, alice, bob):
    fee = create_fee(client, admin_headers, bob["id"])
    res = client.put(f"/api/fees/{fee['id']}/pay", headers=alice["headers"])
    assert res.status_code == 403
    assert client.get(f"/api/fees/{fee['id']}", headers=admin_headers).json()["paid"] is False


def test_paid_iff_payment_date(client, admin_headers, alice):
    create_fee(client, admin_headers, alice["id"])
    paid = create_fee(client, admin_headers, alice["id"])
    client.put(f"/api/fees/{paid['id']}/pay", headers=admin_headers)
    for fee in client.get("/api/fees", headers=admin_headers).json():
        assert fee["paid"] == (fee["payment_date"] is not None)


def test_update_fee(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"], description="Old")
    due = (datetime.utcnow() + timedelta(days=60)).replace(microsecond=0)
    res = client.put(
        f"/api/fees/{fee['id']}",
        json={"amount": "75.25", "due_date": due.isoformat(), "description": "New plan"},
        headers=admin_headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert money(body["amount"]) == money("75.25")
    assert body["description"] == "New plan"
    assert body["due_date"].startswith(due.isoformat())

    missing = client.put(
        "/api/fees/9999",
        json={"amount": "1.00", "due_date": due.isoformat()},
        headers=admin_headers,
    )
    assert missing.status_code == 404
    forbidden = client.put(
        f"/api/fees/{fee['id']}",
        json={"amount": "1.00", "due_date": due.isoformat()},
        headers=alice["headers"],
    )
    assert forbidden.status_code == 403


def test_delete_fee(client, admin_headers, alice):
    fee = create_fee(client, admin_headers, alice["id"])
    assert client.delete(f"/api/fees/{fee['id']}", headers=alice["headers"]).status_code == 403
    assert client.delete(f"/api/fees/{fee['id']}", headers=admin_headers).status_code == 204
    assert client.delete(f"/api/fees/{fee['id']}", headers=admin_headers).status_code == 404


def test_invoice_download(client, admin_headers, alice, bob):
    fee = create_fee(client, admin_headers, alice["id"], description="")
    res = client.get(f"/api/fees/{fee['id']}/invoice", headers=alice["headers"])
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert f"Invoice_{fee['id']}_" in res.headers["content-disposition"]
    assert res.content.startswith(b"%PDF")
    assert b"Monthly Service Fee" in res.content
    assert b"alice@example.com" in res.content

    assert client.get(f"/api/fees/{fee['id']}/invoice", headers=bob["headers"]).status_code == 403
    assert client.get(f"/api/fees/{fee['id']}/invoice", headers=admin_headers).status_code == 200
    assert client.get("/api/fees/777/invoice", headers=admin_headers).status_code == 404
