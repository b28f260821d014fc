from dataclasses import replace
from datetime import datetime
from typing import Sequence

from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from app.domain.errors import ConflictError
from app.domain.value_objects.date_range import DateRange
from app.infrastructure.in_memory.vehicle_repo import InMemoryVehicleRepo


class InMemoryBookingRepo(BookingRepo):
    """
    Repositorio en memoria con la misma semántica condicional que el SQL.

    Ningún método suspende entre la lectura y la escritura, así que cada
    operación es atómica dentro del event loop.
    """

    def __init__(self, vehicle_repo: InMemoryVehicleRepo) -> None:
        self._vehicle_repo = vehicle_repo
        self._items: dict[str, Booking] = {}

    async def get(self, booking_id: str) -> Booking | None:
        booking = self._items.get(booking_id)
        return replace(booking) if booking else None

    async def get_by_order_ref(self, order_ref: str) -> Booking | None:
        for booking in self._items.values():
            if booking.order_ref == order_ref:
                return replace(booking)
        return None

    async def create(self, booking: Booking) -> None:
        self._items[booking.id] = replace(booking)

    async def list_approved_for_vehicle(
        self,
        vehicle_id: str,
        exclude_booking_id: str | None = None,
    ) -> Sequence[Booking]:
        return [
            replace(b)
            for b in self._items.values()
            if b.vehicle_id == vehicle_id
            and b.status == BookingStatus.APPROVED
            and b.id != exclude_booking_id
        ]

    async def list_pending_overlapping(
        self,
        vehicle_id: str,
        date_range: DateRange,
        exclude_booking_id: str,
    ) -> Sequence[Booking]:
        return [
            replace(b)
            for b in self._sorted(self._items.values(), newest_first=False)
            if b.vehicle_id == vehicle_id
            and b.status == BookingStatus.PENDING
            and b.id != exclude_booking_id
            and b.overlaps(date_range)
        ]

    async def list_by_renter(self, renter_id: str) -> Sequence[Booking]:
        return [replace(b) for b in self._sorted(self._items.values()) if b.renter_id == renter_id]

    async def list_by_owner(self, owner_id: str) -> Sequence[Booking]:
        owned = self._vehicle_repo.ids_owned_by(owner_id)
        return [replace(b) for b in self._sorted(self._items.values()) if b.vehicle_id in owned]

    async def approve(self, booking: Booking, now: datetime) -> bool:
        for other in self._items.values():
            if (
                other.id != booking.id
                and other.vehicle_id == booking.vehicle_id
                and other.status == BookingStatus.APPROVED
                and other.overlaps(booking)
            ):
                raise ConflictError(booking.vehicle_id)
        stored = self._items.get(booking.id)
        if not stored or stored.status != BookingStatus.PENDING:
            return False
        stored.status = BookingStatus.APPROVED
        stored.updated_at = now
        return True

    async def update_status(
        self,
        booking_id: str,
        expected: Sequence[BookingStatus],
        target: BookingStatus,
        now: datetime,
        require_payment_status: Sequence[PaymentStatus] | None = None,
    ) -> bool:
        stored = self._items.get(booking_id)
        if not stored or stored.status not in expected:
            return False
        if require_payment_status is not None and stored.payment_status not in require_payment_status:
            return False
        stored.status = target
        stored.updated_at = now
        return True

    async def assign_order_ref(self, booking_id: str, order_ref: str, now: datetime) -> bool:
        stored = self._items.get(booking_id)
        if (
            not stored
            or stored.status != BookingStatus.APPROVED
            or stored.payment_status == PaymentStatus.PAID
        ):
            return False
        stored.order_ref = order_ref
        stored.payment_status = PaymentStatus.UNPAID
        stored.updated_at = now
        return True

    async def transition_payment(
        self,
        booking_id: str,
        order_ref: str,
        target: PaymentStatus,
        now: datetime,
        transaction_key: str | None = None,
        approved_at: datetime | None = None,
    ) -> bool:
        stored = self._items.get(booking_id)
        if (
            not stored
            or stored.order_ref != order_ref
            or stored.payment_status != PaymentStatus.UNPAID
        ):
            return False
        if target == PaymentStatus.PAID and stored.status != BookingStatus.APPROVED:
            return False
        stored.payment_status = target
        stored.updated_at = now
        if target == PaymentStatus.PAID:
            stored.transaction_key = transaction_key
            stored.approved_at = approved_at
        return True

    @staticmethod
    def _sorted(items, newest_first: bool = True) -> list[Booking]:
        return sorted(items, key=lambda b: b.created_at or datetime.min, reverse=newest_first)
