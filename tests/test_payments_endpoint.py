import pytest

from conftest import OTHER_RENTER_ID, OWNER_ID, RENTER_ID, VEHICLE_ID

RENTER = {"X-User-Id": RENTER_ID}
OWNER = {"X-User-Id": OWNER_ID}


@pytest.fixture
def approved_booking(client) -> dict:
    booking = client.post(
        "/api/v1/bookings",
        json={"vehicle_id": VEHICLE_ID, "start_at": "2025-06-01T10:00:00", "end_at": "2025-06-03T10:00:00"},
        headers=RENTER,
    ).json()
    client.post(f"/api/v1/bookings/{booking['id']}/approve", headers=OWNER)
    return booking


def _intent(client, booking_id, json=None):
    return client.post(f"/api/v1/bookings/{booking_id}/payment-intent", json=json, headers=RENTER)


def test_issue_payment_intent(client, approved_booking):
    res = _intent(client, approved_booking["id"], json={"customer_name": "Kim Renter"})

    assert res.status_code == 200
    body = res.json()
    assert body["booking_id"] == approved_booking["id"]
    assert body["amount"] == 100000
    assert body["order_name"] == "Avante rental"
    assert body["customer_name"] == "Kim Renter"
    assert body["order_ref"].startswith("ORDER_")
    assert f"orderId={body['order_ref']}" in body["success_url"]


def test_intent_without_body_uses_default_customer(client, approved_booking):
    res = _intent(client, approved_booking["id"])

    assert res.status_code == 200
    assert res.json()["customer_name"] == "Customer"


def test_intent_for_someone_elses_booking_is_403(client, approved_booking):
    res = client.post(
        f"/api/v1/bookings/{approved_booking['id']}/payment-intent",
        headers={"X-User-Id": OTHER_RENTER_ID},
    )

    assert res.status_code == 403


def test_confirm_marks_paid_and_blocks_new_intent(client, approved_booking):
    intent = _intent(client, approved_booking["id"]).json()

    res = client.post(
        "/api/v1/payments/confirm",
        json={"paymentKey": "pk_live", "orderId": intent["order_ref"], "amount": intent["amount"]},
    )

    assert res.status_code == 200
    assert res.json() == {
        "booking_id": approved_booking["id"],
        "payment_status": "paid",
        "result": "applied",
    }
    info = client.get(f"/api/v1/bookings/{approved_booking['id']}/payment", headers=RENTER).json()
    assert info["is_paid"] is True
    assert info["transaction_key"] == "TEST_pk_live"

    again = _intent(client, approved_booking["id"])
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "ALREADY_PAID"


def test_confirm_amount_mismatch_is_422(client, approved_booking):
    intent = _intent(client, approved_booking["id"]).json()

    res = client.post(
        "/api/v1/payments/confirm",
        json={"transaction_key": "pk_live", "order_ref": intent["order_ref"], "amount": 1},
    )

    assert res.status_code == 422
    assert res.json()["detail"]["code"] == "AMOUNT_MISMATCH"


def test_confirm_unknown_order_is_404(client):
    res = client.post(
        "/api/v1/payments/confirm",
        json={"paymentKey": "pk", "orderId": "ORDER_nope", "amount": 1000},
    )

    assert res.status_code == 404


def test_fail_redirect_marks_failed(client, approved_booking):
    intent = _intent(client, approved_booking["id"]).json()

    res = client.post(
        "/api/v1/payments/fail",
        json={"orderId": intent["order_ref"], "code": "PAY_PROCESS_CANCELED", "message": "closed"},
    )

    assert res.status_code == 200
    assert res.json()["payment_status"] == "failed"
    booking = client.get(f"/api/v1/bookings/{approved_booking['id']}", headers=RENTER).json()
    assert booking["status"] == "approved"
    assert booking["payment_status"] == "failed"


def test_purge_worker(client):
    res = client.post("/api/v1/workers/payment-events/purge")

    assert res.status_code == 200
    assert res.json() == {"purged": 0}
