from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from app.domain.errors import ConflictError
from app.domain.value_objects.date_range import DateRange
from app.infrastructure.db.tables import bookings, vehicles


class BookingRepoSQL(BookingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, booking_id: str) -> Booking | None:
        stmt = select(bookings).where(bookings.c.id == booking_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_booking(row) if row else None

    async def get_by_order_ref(self, order_ref: str) -> Booking | None:
        stmt = select(bookings).where(bookings.c.order_ref == order_ref).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_booking(row) if row else None

    async def create(self, booking: Booking) -> None:
        stmt = insert(bookings).values(
            id=booking.id,
            vehicle_id=booking.vehicle_id,
            renter_id=booking.renter_id,
            start_at=booking.start_at,
            end_at=booking.end_at,
            total_price=booking.total_price,
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            pickup_location=booking.pickup_location,
            return_location=booking.return_location,
            order_ref=booking.order_ref,
            transaction_key=booking.transaction_key,
            approved_at=booking.approved_at,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )
        await self._session.execute(stmt)

    async def list_approved_for_vehicle(
        self,
        vehicle_id: str,
        exclude_booking_id: str | None = None,
    ) -> Sequence[Booking]:
        stmt = select(bookings).where(
            bookings.c.vehicle_id == vehicle_id,
            bookings.c.status == BookingStatus.APPROVED.value,
        )
        if exclude_booking_id:
            stmt = stmt.where(bookings.c.id != exclude_booking_id)
        result = await self._session.execute(stmt)
        return [_to_booking(row) for row in result.mappings().all()]

    async def list_pending_overlapping(
        self,
        vehicle_id: str,
        date_range: DateRange,
        exclude_booking_id: str,
    ) -> Sequence[Booking]:
        stmt = (
            select(bookings)
            .where(
                bookings.c.vehicle_id == vehicle_id,
                bookings.c.status == BookingStatus.PENDING.value,
                bookings.c.id != exclude_booking_id,
                bookings.c.start_at < date_range.end,
                bookings.c.end_at > date_range.start,
            )
            .order_by(bookings.c.created_at)
        )
        result = await self._session.execute(stmt)
        return [_to_booking(row) for row in result.mappings().all()]

    async def list_by_renter(self, renter_id: str) -> Sequence[Booking]:
        stmt = (
            select(bookings)
            .where(bookings.c.renter_id == renter_id)
            .order_by(bookings.c.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [_to_booking(row) for row in result.mappings().all()]

    async def list_by_owner(self, owner_id: str) -> Sequence[Booking]:
        stmt = (
            select(bookings)
            .join(vehicles, vehicles.c.id == bookings.c.vehicle_id)
            .where(vehicles.c.owner_id == owner_id)
            .order_by(bookings.c.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [_to_booking(row) for row in result.mappings().all()]

    async def approve(self, booking: Booking, now: datetime) -> bool:
        # Serializa las aprobaciones del mismo vehículo. Un UPDATE sin cambios
        # toma el bloqueo de escritura en todos los motores, SQLite incluido.
        await self._session.execute(
            update(vehicles)
            .where(vehicles.c.id == booking.vehicle_id)
            .values(status=vehicles.c.status)
        )
        overlap = (
            select(bookings.c.id)
            .where(
                bookings.c.vehicle_id == booking.vehicle_id,
                bookings.c.status == BookingStatus.APPROVED.value,
                bookings.c.id != booking.id,
                bookings.c.start_at < booking.end_at,
                bookings.c.end_at > booking.start_at,
            )
            .limit(1)
        )
        if (await self._session.execute(overlap)).first() is not None:
            raise ConflictError(booking.vehicle_id)

        stmt = (
            update(bookings)
            .where(
                bookings.c.id == booking.id,
                bookings.c.status == BookingStatus.PENDING.value,
            )
            .values(status=BookingStatus.APPROVED.value, updated_at=now)
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError as exc:
            raise ConflictError(booking.vehicle_id) from exc
        return result.rowcount == 1

    async def update_status(
        self,
        booking_id: str,
        expected: Sequence[BookingStatus],
        target: BookingStatus,
        now: datetime,
        require_payment_status: Sequence[PaymentStatus] | None = None,
    ) -> bool:
        stmt = update(bookings).where(
            bookings.c.id == booking_id,
            bookings.c.status.in_([status.value for status in expected]),
        )
        if require_payment_status is not None:
            stmt = stmt.where(
                bookings.c.payment_status.in_([status.value for status in require_payment_status])
            )
        result = await self._session.execute(stmt.values(status=target.value, updated_at=now))
        return result.rowcount == 1

    async def assign_order_ref(self, booking_id: str, order_ref: str, now: datetime) -> bool:
        stmt = (
            update(bookings)
            .where(
                bookings.c.id == booking_id,
                bookings.c.status == BookingStatus.APPROVED.value,
                bookings.c.payment_status != PaymentStatus.PAID.value,
            )
            .values(
                order_ref=order_ref,
                payment_status=PaymentStatus.UNPAID.value,
                updated_at=now,
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def transition_payment(
        self,
        booking_id: str,
        order_ref: str,
        target: PaymentStatus,
        now: datetime,
        transaction_key: str | None = None,
        approved_at: datetime | None = None,
    ) -> bool:
        values: dict[str, Any] = {"payment_status": target.value, "updated_at": now}
        if target == PaymentStatus.PAID:
            values["transaction_key"] = transaction_key
            values["approved_at"] = approved_at
        stmt = update(bookings).where(
            bookings.c.id == booking_id,
            bookings.c.order_ref == order_ref,
            bookings.c.payment_status == PaymentStatus.UNPAID.value,
        )
        if target == PaymentStatus.PAID:
            stmt = stmt.where(bookings.c.status == BookingStatus.APPROVED.value)
        stmt = stmt.values(**values)
        result = await self._session.execute(stmt)
        return result.rowcount == 1


def _to_booking(row: Any) -> Booking:
    return Booking(
        id=row["id"],
        vehicle_id=row["vehicle_id"],
        renter_id=row["renter_id"],
        start_at=row["start_at"],
        end_at=row["end_at"],
        total_price=row["total_price"],
        status=BookingStatus(row["status"]),
        payment_status=PaymentStatus(row["payment_status"]),
        pickup_location=row.get("pickup_location"),
        return_location=row.get("return_location"),
        order_ref=row.get("order_ref"),
        transaction_key=row.get("transaction_key"),
        approved_at=row.get("approved_at"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )
