import json
from datetime import datetime

import pytest

from app.domain.entities.booking import PaymentStatus
from app.domain.errors import InvalidPayloadError, InvalidSignatureError
from app.infrastructure.gateways.toss_payment_gateway import compute_webhook_signature
from conftest import OWNER_ID, RENTER_ID, VEHICLE_ID, WEBHOOK_SECRET

TOTAL = 100000


async def _payable(use_cases) -> tuple[str, str]:
    actions = use_cases["booking_actions"]
    created = await actions.create(RENTER_ID, VEHICLE_ID, datetime(2025, 6, 1, 10), datetime(2025, 6, 3, 10))
    await actions.approve(OWNER_ID, created.data.id)
    intent = await use_cases["payment_actions"].issue_intent(RENTER_ID, created.data.id)
    return created.data.id, intent.data.order_ref


def _webhook(order_ref, status="DONE", amount=TOTAL, payment_key="pk_wh_1") -> bytes:
    return json.dumps(
        {
            "eventType": "PAYMENT_STATUS_CHANGED",
            "createdAt": "2025-05-20T18:05:00+09:00",
            "data": {
                "paymentKey": payment_key,
                "orderId": order_ref,
                "status": status,
                "approvedAt": "2025-05-20T18:04:30+09:00",
                "totalAmount": amount,
            },
        }
    ).encode()


async def _deliver(use_cases, body: bytes, signature: str | None = "sign"):
    if signature == "sign":
        signature = compute_webhook_signature(body, WEBHOOK_SECRET)
    return await use_cases["handle_webhook"].execute(body, signature)


async def test_done_webhook_marks_paid(use_cases, bundle):
    booking_id, order_ref = await _payable(use_cases)

    response = await _deliver(use_cases, _webhook(order_ref))

    assert response == {
        "success": True,
        "booking_id": booking_id,
        "payment_status": "paid",
        "result": "applied",
    }
    stored = await bundle["booking_repo"].get(booking_id)
    assert stored.payment_status == PaymentStatus.PAID
    assert stored.transaction_key == "pk_wh_1"
    assert stored.approved_at == datetime(2025, 5, 20, 9, 4, 30)


async def test_redelivery_returns_same_outcome(use_cases):
    _, order_ref = await _payable(use_cases)
    body = _webhook(order_ref)

    first = await _deliver(use_cases, body)
    second = await _deliver(use_cases, body)

    assert first == second


async def test_webhook_and_confirm_converge(use_cases, bundle):
    booking_id, order_ref = await _payable(use_cases)

    await _deliver(use_cases, _webhook(order_ref))
    confirmed = await use_cases["payment_actions"].confirm("pk_wh_1", order_ref, TOTAL)

    assert confirmed.success
    assert confirmed.data.payment_status == PaymentStatus.PAID
    assert (await bundle["booking_repo"].get(booking_id)).transaction_key == "pk_wh_1"


async def test_bad_signature_is_rejected(use_cases):
    _, order_ref = await _payable(use_cases)

    with pytest.raises(InvalidSignatureError):
        await _deliver(use_cases, _webhook(order_ref), signature="forged")


async def test_missing_signature_is_rejected(use_cases):
    _, order_ref = await _payable(use_cases)

    with pytest.raises(InvalidSignatureError):
        await _deliver(use_cases, _webhook(order_ref), signature=None)


@pytest.mark.parametrize(
    "body",
    [b"", b"not json", b"[1, 2]", json.dumps({"data": {"status": "DONE"}}).encode()],
)
async def test_malformed_payload(use_cases, body):
    with pytest.raises(InvalidPayloadError):
        await _deliver(use_cases, body)


async def test_unknown_order_is_acknowledged(use_cases):
    response = await _deliver(use_cases, _webhook("ORDER_unknown"))

    assert response == {"success": True, "message": "Booking not found"}


async def test_amount_mismatch_is_acknowledged_without_payment(use_cases, bundle):
    booking_id, order_ref = await _payable(use_cases)

    response = await _deliver(use_cases, _webhook(order_ref, amount=1))

    assert response["success"] is True
    assert "payment_status" not in response
    assert (await bundle["booking_repo"].get(booking_id)).payment_status == PaymentStatus.UNPAID


async def test_waiting_for_deposit_is_informational(use_cases, bundle):
    booking_id, order_ref = await _payable(use_cases)

    response = await _deliver(use_cases, _webhook(order_ref, status="WAITING_FOR_DEPOSIT"))

    assert response["result"] == "informational"
    assert (await bundle["booking_repo"].get(booking_id)).payment_status == PaymentStatus.UNPAID


async def test_canceled_webhook_marks_failed(use_cases, bundle):
    booking_id, order_ref = await _payable(use_cases)

    response = await _deliver(use_cases, _webhook(order_ref, status="CANCELED"))

    assert response["payment_status"] == "failed"
    assert (await bundle["booking_repo"].get(booking_id)).payment_status == PaymentStatus.FAILED


async def test_unknown_status_is_ignored(use_cases):
    _, order_ref = await _payable(use_cases)

    response = await _deliver(use_cases, _webhook(order_ref, status="SOMETHING_NEW"))

    assert response == {"success": True, "message": "Ignored"}


async def test_redelivery_without_timestamps_is_deduplicated(use_cases, bundle, clock):
    booking_id, order_ref = await _payable(use_cases)
    body = json.dumps(
        {"data": {"paymentKey": "pk_wh_1", "orderId": order_ref, "status": "DONE", "totalAmount": TOTAL}}
    ).encode()

    first = await _deliver(use_cases, body)
    clock.advance(minutes=5)
    second = await _deliver(use_cases, body)

    assert first["result"] == "applied"
    assert second == first
    assert (await bundle["booking_repo"].get(booking_id)).payment_status == PaymentStatus.PAID


async def test_partial_cancel_of_paid_booking_records_cancelled_amount(use_cases, bundle):
    booking_id, order_ref = await _payable(use_cases)
    await _deliver(use_cases, _webhook(order_ref))
    body = json.dumps(
        {
            "createdAt": "2025-05-21T10:00:00+09:00",
            "data": {
                "paymentKey": "pk_wh_1",
                "orderId": order_ref,
                "status": "PARTIAL_CANCELED",
                "cancels": [{"cancelReason": "damage deposit", "cancelAmount": 30000}],
            },
        }
    ).encode()

    response = await _deliver(use_cases, body)

    assert response["result"] == "anomaly"
    anomalies = await bundle["anomaly_repo"].list_by_booking(booking_id)
    assert len(anomalies) == 1
    assert "30000" in anomalies[0].reason
