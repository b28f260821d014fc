"""
Repositorios SQL sobre SQLite in-memory (aiosqlite).

Verifican que las transiciones condicionales, la deduplicación durable y el
flujo completo reserva -> aprobación -> pago se comportan igual que los
adaptadores in-memory.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from app.api.dependencies import build_use_cases
from app.application.interfaces.id_generator import FakeIdGenerator
from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from app.domain.entities.payment_event import ReconcileResult
from app.domain.errors import ConflictError
from app.domain.value_objects.date_range import DateRange
from app.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from app.infrastructure.db.repositories.payment_anomaly_repo_sql import PaymentAnomalyRepoSQL
from app.infrastructure.db.repositories.payment_event_store_sql import PaymentEventStoreSQL
from app.infrastructure.db.repositories.vehicle_repo_sql import VehicleRepoSQL
from app.infrastructure.db.tables import payment_event_dedup
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from conftest import OTHER_RENTER_ID, OWNER_ID, RENTER_ID, VEHICLE_ID

pytestmark = pytest.mark.sql

NOW = datetime(2025, 5, 20, 9, 0)


def _booking(booking_id: str, start: datetime, end: datetime, renter_id: str = RENTER_ID) -> Booking:
    return Booking(
        id=booking_id,
        vehicle_id=VEHICLE_ID,
        renter_id=renter_id,
        start_at=start,
        end_at=end,
        total_price=100000,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def sql_use_cases(sql_session, clock, settings):
    bundle = {
        "clock": clock,
        "id_generator": FakeIdGenerator(),
        "vehicle_repo": VehicleRepoSQL(sql_session),
        "booking_repo": BookingRepoSQL(sql_session),
        "event_store": PaymentEventStoreSQL(sql_session),
        "anomaly_repo": PaymentAnomalyRepoSQL(sql_session),
        "tx_manager": SQLAlchemyTransactionManager(sql_session),
        "payment_gateway": StubPaymentGateway(clock=clock),
    }
    return build_use_cases(bundle, settings), bundle


class TestBookingRepoSQL:
    async def test_create_and_get(self, sql_session):
        repo = BookingRepoSQL(sql_session)
        await repo.create(_booking("b-1", datetime(2025, 6, 1), datetime(2025, 6, 3)))

        stored = await repo.get("b-1")

        assert stored.status == BookingStatus.PENDING
        assert stored.payment_status == PaymentStatus.UNPAID
        assert stored.start_at == datetime(2025, 6, 1)
        assert await repo.get("missing") is None

    async def test_conditional_status_update(self, sql_session):
        repo = BookingRepoSQL(sql_session)
        await repo.create(_booking("b-1", datetime(2025, 6, 1), datetime(2025, 6, 3)))

        first = await repo.update_status("b-1", [BookingStatus.PENDING], BookingStatus.REJECTED, NOW)
        second = await repo.update_status("b-1", [BookingStatus.PENDING], BookingStatus.CANCELLED, NOW)

        assert first is True
        assert second is False
        assert (await repo.get("b-1")).status == BookingStatus.REJECTED

    async def test_approve_rejects_overlap(self, sql_session):
        repo = BookingRepoSQL(sql_session)
        a = _booking("b-a", datetime(2025, 6, 1), datetime(2025, 6, 5))
        b = _booking("b-b", datetime(2025, 6, 3), datetime(2025, 6, 7), renter_id=OTHER_RENTER_ID)
        await repo.create(a)
        await repo.create(b)

        assert await repo.approve(a, NOW) is True
        with pytest.raises(ConflictError):
            await repo.approve(b, NOW)
        assert (await repo.get("b-b")).status == BookingStatus.PENDING

    async def test_pending_overlap_query_uses_half_open_ranges(self, sql_session):
        repo = BookingRepoSQL(sql_session)
        await repo.create(_booking("b-a", datetime(2025, 6, 1), datetime(2025, 6, 5)))
        await repo.create(_booking("b-touch", datetime(2025, 6, 5), datetime(2025, 6, 6)))
        await repo.create(_booking("b-over", datetime(2025, 6, 4), datetime(2025, 6, 6)))

        found = await repo.list_pending_overlapping(
            VEHICLE_ID, DateRange(datetime(2025, 6, 1), datetime(2025, 6, 5)), exclude_booking_id="b-a"
        )

        assert [b.id for b in found] == ["b-over"]

    async def test_payment_transition_is_single_shot(self, sql_session):
        repo = BookingRepoSQL(sql_session)
        booking = _booking("b-1", datetime(2025, 6, 1), datetime(2025, 6, 3))
        await repo.create(booking)
        await repo.approve(booking, NOW)
        await repo.assign_order_ref("b-1", "ORDER_x", NOW)

        paid = await repo.transition_payment("b-1", "ORDER_x", PaymentStatus.PAID, NOW, "tk", NOW)
        failed = await repo.transition_payment("b-1", "ORDER_x", PaymentStatus.FAILED, NOW)

        assert (paid, failed) == (True, False)
        stored = await repo.get("b-1")
        assert stored.payment_status == PaymentStatus.PAID
        assert stored.transaction_key == "tk"
        assert await repo.assign_order_ref("b-1", "ORDER_y", NOW) is False

    async def test_payment_requires_approved_booking(self, sql_session):
        repo = BookingRepoSQL(sql_session)
        booking = _booking("b-1", datetime(2025, 6, 1), datetime(2025, 6, 3))
        await repo.create(booking)
        await repo.approve(booking, NOW)
        await repo.assign_order_ref("b-1", "ORDER_x", NOW)
        await repo.update_status("b-1", [BookingStatus.APPROVED], BookingStatus.CANCELLED, NOW)

        paid = await repo.transition_payment("b-1", "ORDER_x", PaymentStatus.PAID, NOW, "tk", NOW)

        assert paid is False
        stored = await repo.get("b-1")
        assert stored.status == BookingStatus.CANCELLED
        assert stored.payment_status == PaymentStatus.UNPAID

    async def test_owner_listing_joins_vehicle(self, sql_session):
        repo = BookingRepoSQL(sql_session)
        await repo.create(_booking("b-1", datetime(2025, 6, 1), datetime(2025, 6, 3)))

        assert [b.id for b in await repo.list_by_owner(OWNER_ID)] == ["b-1"]
        assert await repo.list_by_owner(RENTER_ID) == []


class TestPaymentEventStoreSQL:
    async def test_claim_then_duplicate(self, sql_session):
        store = PaymentEventStoreSQL(sql_session)
        expires = NOW + timedelta(hours=1)

        assert await store.claim("k1", NOW, expires) is None
        await store.record_outcome("k1", {"booking_id": "b-1", "payment_status": "paid", "result": "applied"})

        again = await store.claim("k1", NOW + timedelta(minutes=5), expires)
        assert again.outcome["result"] == "applied"

    async def test_expired_claim_is_reclaimable(self, sql_session):
        store = PaymentEventStoreSQL(sql_session)
        await store.claim("k1", NOW, NOW + timedelta(hours=1))

        reclaimed = await store.claim("k1", NOW + timedelta(hours=2), NOW + timedelta(hours=3))

        assert reclaimed is None

    async def test_purge_expired(self, sql_session):
        store = PaymentEventStoreSQL(sql_session)
        await store.claim("old", NOW, NOW + timedelta(minutes=1))
        await store.claim("fresh", NOW, NOW + timedelta(hours=1))

        purged = await store.purge_expired(NOW + timedelta(minutes=30))

        assert purged == 1
        rows = (await sql_session.execute(select(payment_event_dedup.c.dedup_key))).scalars().all()
        assert rows == ["fresh"]


class TestSqlFlow:
    async def test_book_approve_pay(self, sql_use_cases):
        use_cases, bundle = sql_use_cases
        bookings = use_cases["booking_actions"]
        payments = use_cases["payment_actions"]

        a = (await bookings.create(RENTER_ID, VEHICLE_ID, datetime(2025, 6, 1, 10), datetime(2025, 6, 3, 10))).data
        b = (
            await bookings.create(
                OTHER_RENTER_ID, VEHICLE_ID, datetime(2025, 6, 2, 10), datetime(2025, 6, 4, 10)
            )
        ).data

        approval = await bookings.approve(OWNER_ID, a.id)
        assert approval.success
        assert approval.data.rejected_booking_ids == [b.id]

        intent = (await payments.issue_intent(RENTER_ID, a.id)).data
        confirmed = await payments.confirm("pk_sql", intent.order_ref, a.total_price)
        assert confirmed.data.result == ReconcileResult.APPLIED

        stored = await bundle["booking_repo"].get(a.id)
        assert stored.status == BookingStatus.APPROVED
        assert stored.payment_status == PaymentStatus.PAID
        assert stored.transaction_key == "TEST_pk_sql"
        assert (await bundle["booking_repo"].get(b.id)).status == BookingStatus.REJECTED

    async def test_late_failure_is_recorded_as_anomaly(self, sql_use_cases):
        use_cases, bundle = sql_use_cases
        bookings = use_cases["booking_actions"]
        payments = use_cases["payment_actions"]
        booking = (
            await bookings.create(RENTER_ID, VEHICLE_ID, datetime(2025, 6, 1, 10), datetime(2025, 6, 3, 10))
        ).data
        await bookings.approve(OWNER_ID, booking.id)
        intent = (await payments.issue_intent(RENTER_ID, booking.id)).data
        await payments.confirm("pk_sql", intent.order_ref, booking.total_price)

        late = await payments.fail(intent.order_ref, "PAY_PROCESS_ABORTED", "late")

        assert late.data.result == ReconcileResult.ANOMALY
        anomalies = await bundle["anomaly_repo"].list_by_booking(booking.id)
        assert len(anomalies) == 1
        assert anomalies[0].current_payment_status == PaymentStatus.PAID

    async def test_confirm_calls_gateway_without_open_transaction(self, sql_use_cases, sql_session, monkeypatch):
        use_cases, bundle = sql_use_cases
        bookings = use_cases["booking_actions"]
        payments = use_cases["payment_actions"]
        booking = (
            await bookings.create(RENTER_ID, VEHICLE_ID, datetime(2025, 6, 1, 10), datetime(2025, 6, 3, 10))
        ).data
        await bookings.approve(OWNER_ID, booking.id)
        intent = (await payments.issue_intent(RENTER_ID, booking.id)).data
        gateway = bundle["payment_gateway"]
        original_confirm = gateway.confirm_payment
        in_transaction = []

        async def confirm_payment(**kwargs):
            in_transaction.append(sql_session.in_transaction())
            return await original_confirm(**kwargs)

        monkeypatch.setattr(gateway, "confirm_payment", confirm_payment)

        confirmed = await payments.confirm("pk_sql", intent.order_ref, booking.total_price)

        assert confirmed.success
        assert in_transaction == [False]
