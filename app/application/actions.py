"""
Frontera de acciones de la capa de aplicación.

La capa de presentación nunca recibe excepciones de negocio: cada acción
devuelve un ActionResult con el dato o con el código de error del dominio.
Las excepciones que no son DomainError (bugs, caídas de infraestructura)
siguen propagándose hasta el manejador global.
"""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from app.application.dtos.booking_dto import ApprovalResultDTO
from app.application.dtos.payment_dto import PaymentInfoDTO, PaymentIntentDTO
from app.application.services.availability import AvailabilityChecker
from app.application.use_cases.approve_booking import ApproveBookingUseCase
from app.application.use_cases.cancel_booking import CancelBookingUseCase
from app.application.use_cases.complete_booking import CompleteBookingUseCase
from app.application.use_cases.confirm_payment import ConfirmPaymentUseCase
from app.application.use_cases.create_booking import CreateBookingUseCase
from app.application.use_cases.handle_payment_failure import HandlePaymentFailureUseCase
from app.application.use_cases.issue_payment_intent import IssuePaymentIntentUseCase
from app.application.use_cases.query_bookings import (
    GetBookingUseCase,
    GetPaymentInfoUseCase,
    ListMyBookingsUseCase,
    ListReceivedBookingsUseCase,
)
from app.application.use_cases.reject_booking import RejectBookingUseCase
from app.application.use_cases.reject_competing_bookings import RejectCompetingBookingsUseCase
from app.domain.entities.booking import Booking
from app.domain.entities.payment_event import ReconcileOutcome
from app.domain.errors import DomainError, UnauthenticatedError

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class ActionResult(Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None
    code: str | None = None
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T, warnings: list[str] | None = None) -> "ActionResult[T]":
        return cls(success=True, data=data, warnings=list(warnings or []))

    @classmethod
    def fail(cls, error: DomainError) -> "ActionResult[T]":
        return cls(success=False, error=error.message, code=error.code)


async def run_action(operation: str, call: Awaitable[T]) -> ActionResult[T]:
    """Ejecuta una corrutina de caso de uso y convierte DomainError en resultado."""
    try:
        return ActionResult.ok(await call)
    except DomainError as exc:
        logger.info(
            "Action rejected",
            extra={"operation": operation, "error_code": exc.code, "error": exc.message},
        )
        return ActionResult.fail(exc)


def _require_actor(actor_id: str | None) -> str:
    if not actor_id:
        raise UnauthenticatedError()
    return actor_id


class BookingActions:
    """Acciones de reserva invocadas por la presentación (dueños y arrendatarios)."""

    def __init__(
        self,
        create_booking: CreateBookingUseCase,
        approve_booking: ApproveBookingUseCase,
        reject_booking: RejectBookingUseCase,
        cancel_booking: CancelBookingUseCase,
        complete_booking: CompleteBookingUseCase,
        reject_competing: RejectCompetingBookingsUseCase,
        get_booking: GetBookingUseCase,
        list_my_bookings: ListMyBookingsUseCase,
        list_received_bookings: ListReceivedBookingsUseCase,
        availability_checker: AvailabilityChecker,
    ) -> None:
        self._create_booking = create_booking
        self._approve_booking = approve_booking
        self._reject_booking = reject_booking
        self._cancel_booking = cancel_booking
        self._complete_booking = complete_booking
        self._reject_competing = reject_competing
        self._get_booking = get_booking
        self._list_my_bookings = list_my_bookings
        self._list_received_bookings = list_received_bookings
        self._availability_checker = availability_checker

    async def create(
        self,
        actor_id: str | None,
        vehicle_id: str,
        start_at: datetime,
        end_at: datetime,
        pickup_location: str | None = None,
        return_location: str | None = None,
    ) -> ActionResult[Booking]:
        async def call() -> Booking:
            return await self._create_booking.execute(
                vehicle_id=vehicle_id,
                renter_id=_require_actor(actor_id),
                start_at=start_at,
                end_at=end_at,
                pickup_location=pickup_location,
                return_location=return_location,
            )

        return await run_action("create_booking", call())

    async def approve(self, actor_id: str | None, booking_id: str) -> ActionResult[ApprovalResultDTO]:
        async def call() -> ApprovalResultDTO:
            return await self._approve_booking.execute(booking_id, _require_actor(actor_id))

        result = await run_action("approve_booking", call())
        if result.success and result.data is not None:
            result.warnings = list(result.data.warnings)
        return result

    async def reject(self, actor_id: str | None, booking_id: str) -> ActionResult[Booking]:
        async def call() -> Booking:
            return await self._reject_booking.execute(booking_id, _require_actor(actor_id))

        return await run_action("reject_booking", call())

    async def cancel(self, actor_id: str | None, booking_id: str) -> ActionResult[Booking]:
        async def call() -> Booking:
            return await self._cancel_booking.execute(booking_id, _require_actor(actor_id))

        return await run_action("cancel_booking", call())

    async def complete(self, actor_id: str | None, booking_id: str) -> ActionResult[Booking]:
        async def call() -> Booking:
            return await self._complete_booking.execute(booking_id, _require_actor(actor_id))

        return await run_action("complete_booking", call())

    async def reject_competing(self, actor_id: str | None, booking_id: str) -> ActionResult[list[str]]:
        async def call() -> list[str]:
            return await self._reject_competing.execute(booking_id, _require_actor(actor_id))

        return await run_action("reject_competing_bookings", call())

    async def get(self, actor_id: str | None, booking_id: str) -> ActionResult[Booking]:
        async def call() -> Booking:
            return await self._get_booking.execute(booking_id, _require_actor(actor_id))

        return await run_action("get_booking", call())

    async def list_mine(self, actor_id: str | None) -> ActionResult[list[Booking]]:
        async def call() -> list[Booking]:
            return list(await self._list_my_bookings.execute(_require_actor(actor_id)))

        return await run_action("list_my_bookings", call())

    async def list_received(self, actor_id: str | None) -> ActionResult[list[Booking]]:
        async def call() -> list[Booking]:
            return list(await self._list_received_bookings.execute(_require_actor(actor_id)))

        return await run_action("list_received_bookings", call())

    async def is_available(
        self, vehicle_id: str, start: datetime, end: datetime
    ) -> ActionResult[bool]:
        return await run_action(
            "is_available", self._availability_checker.is_available(vehicle_id, start, end)
        )


class PaymentActions:
    """Acciones de pago: emisión del intento, confirmación, falla y consulta."""

    def __init__(
        self,
        issue_payment_intent: IssuePaymentIntentUseCase,
        confirm_payment: ConfirmPaymentUseCase,
        handle_payment_failure: HandlePaymentFailureUseCase,
        get_payment_info: GetPaymentInfoUseCase,
    ) -> None:
        self._issue_payment_intent = issue_payment_intent
        self._confirm_payment = confirm_payment
        self._handle_payment_failure = handle_payment_failure
        self._get_payment_info = get_payment_info

    async def issue_intent(
        self, actor_id: str | None, booking_id: str, customer_name: str | None = None
    ) -> ActionResult[PaymentIntentDTO]:
        async def call() -> PaymentIntentDTO:
            return await self._issue_payment_intent.execute(
                booking_id, _require_actor(actor_id), customer_name=customer_name
            )

        return await run_action("issue_payment_intent", call())

    async def confirm(
        self, transaction_key: str, order_ref: str, amount: int
    ) -> ActionResult[ReconcileOutcome]:
        return await run_action(
            "confirm_payment",
            self._confirm_payment.execute(
                transaction_key=transaction_key, order_ref=order_ref, amount=amount
            ),
        )

    async def fail(
        self, order_ref: str, error_code: str, error_message: str
    ) -> ActionResult[ReconcileOutcome]:
        return await run_action(
            "handle_payment_failure",
            self._handle_payment_failure.execute(order_ref, error_code, error_message),
        )

    async def payment_info(self, actor_id: str | None, booking_id: str) -> ActionResult[PaymentInfoDTO]:
        async def call() -> PaymentInfoDTO:
            return await self._get_payment_info.execute(booking_id, _require_actor(actor_id))

        return await run_action("get_payment_info", call())


__all__ = ["ActionResult", "BookingActions", "PaymentActions", "run_action"]
