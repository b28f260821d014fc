from conftest import OTHER_RENTER_ID, OWNER_ID, RENTER_ID, VEHICLE_ID

RENTER = {"X-User-Id": RENTER_ID}
OTHER = {"X-User-Id": OTHER_RENTER_ID}
OWNER = {"X-User-Id": OWNER_ID}


def _create(client, start="2025-06-01T10:00:00", end="2025-06-03T10:00:00", headers=RENTER):
    return client.post(
        "/api/v1/bookings",
        json={"vehicle_id": VEHICLE_ID, "start_at": start, "end_at": end, "pickup_location": "ICN T1"},
        headers=headers,
    )


def test_create_booking_returns_201(client):
    res = _create(client)

    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "pending"
    assert body["payment_status"] == "unpaid"
    assert body["total_price"] == 100000
    assert body["pickup_location"] == "ICN T1"
    assert body["start_at"] == "2025-06-01T10:00:00"


def test_create_booking_normalizes_offsets_to_utc(client):
    res = _create(client, start="2025-06-01T19:00:00+09:00", end="2025-06-03T19:00:00+09:00")

    assert res.status_code == 201
    assert res.json()["start_at"] == "2025-06-01T10:00:00"


def test_create_booking_without_user_is_401(client):
    res = _create(client, headers={})

    assert res.status_code == 401
    assert res.json()["detail"]["code"] == "UNAUTHENTICATED"


def test_owner_self_booking_is_403(client):
    assert _create(client, headers=OWNER).status_code == 403


def test_invalid_range_is_422(client):
    res = _create(client, start="2025-06-03T10:00:00", end="2025-06-01T10:00:00")

    assert res.status_code == 422
    assert res.json()["detail"]["code"] == "INVALID_RANGE"


def test_unknown_fields_are_rejected(client):
    res = client.post(
        "/api/v1/bookings",
        json={
            "vehicle_id": VEHICLE_ID,
            "start_at": "2025-06-01T10:00:00",
            "end_at": "2025-06-03T10:00:00",
            "total_price": 1,
        },
        headers=RENTER,
    )

    assert res.status_code == 422


def test_approve_cascades_and_blocks_new_requests(client):
    a = _create(client).json()
    b = _create(client, start="2025-06-02T10:00:00", end="2025-06-04T10:00:00", headers=OTHER).json()

    res = client.post(f"/api/v1/bookings/{a['id']}/approve", headers=OWNER)

    assert res.status_code == 200
    body = res.json()
    assert body["booking"]["status"] == "approved"
    assert body["rejected_booking_ids"] == [b["id"]]
    assert body["warnings"] == []
    assert client.get(f"/api/v1/bookings/{b['id']}", headers=OTHER).json()["status"] == "rejected"

    conflict = _create(client, start="2025-06-02T10:00:00", end="2025-06-04T10:00:00", headers=OTHER)
    assert conflict.status_code == 409
    assert conflict.json()["detail"]["code"] == "CONFLICT"


def test_approve_twice_is_409(client):
    booking = _create(client).json()
    client.post(f"/api/v1/bookings/{booking['id']}/approve", headers=OWNER)

    res = client.post(f"/api/v1/bookings/{booking['id']}/approve", headers=OWNER)

    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "INVALID_STATE"


def test_renter_cannot_approve(client):
    booking = _create(client).json()

    assert client.post(f"/api/v1/bookings/{booking['id']}/approve", headers=RENTER).status_code == 403


def test_reject_and_cancel(client):
    first = _create(client).json()
    second = _create(client, start="2025-07-01T10:00:00", end="2025-07-02T10:00:00").json()

    rejected = client.post(f"/api/v1/bookings/{first['id']}/reject", headers=OWNER)
    cancelled = client.post(f"/api/v1/bookings/{second['id']}/cancel", headers=RENTER)

    assert rejected.json()["status"] == "rejected"
    assert cancelled.json()["status"] == "cancelled"


def test_reject_competing_retry(client):
    booking = _create(client).json()
    client.post(f"/api/v1/bookings/{booking['id']}/approve", headers=OWNER)

    res = client.post(f"/api/v1/bookings/{booking['id']}/reject-competing", headers=OWNER)

    assert res.status_code == 200
    assert res.json() == {"booking_id": booking["id"], "rejected_booking_ids": []}


def test_lists_and_visibility(client):
    booking = _create(client).json()

    mine = client.get("/api/v1/bookings/mine", headers=RENTER).json()
    received = client.get("/api/v1/bookings/received", headers=OWNER).json()

    assert [b["id"] for b in mine] == [booking["id"]]
    assert [b["id"] for b in received] == [booking["id"]]
    assert client.get("/api/v1/bookings/mine", headers=OTHER).json() == []
    assert client.get(f"/api/v1/bookings/{booking['id']}", headers=OTHER).status_code == 403
    assert client.get("/api/v1/bookings/missing", headers=RENTER).status_code == 404


def test_vehicle_availability(client):
    booking = _create(client).json()
    url = f"/api/v1/vehicles/{VEHICLE_ID}/availability"
    params = {"start": "2025-06-02T00:00:00", "end": "2025-06-02T12:00:00"}

    assert client.get(url, params=params).json()["available"] is True

    client.post(f"/api/v1/bookings/{booking['id']}/approve", headers=OWNER)
    assert client.get(url, params=params).json()["available"] is False
