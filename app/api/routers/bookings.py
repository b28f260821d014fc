from typing import Annotated

from fastapi import APIRouter, Body, Depends, status

from app.api.dependencies import get_actor_id, get_use_cases
from app.api.results import unwrap
from app.api.schemas.bookings import (
    ApproveBookingResponse,
    BookingResponse,
    CreateBookingRequest,
    RejectCompetingResponse,
)
from app.api.schemas.payments import (
    PaymentInfoResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
)
from app.infrastructure.db.retry import retry_on_deadlock

router = APIRouter()

Actor = Annotated[str | None, Depends(get_actor_id)]
UseCases = Annotated[dict, Depends(get_use_cases)]


@router.post(
    "/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(payload: CreateBookingRequest, actor_id: Actor, use_cases: UseCases) -> BookingResponse:
    result = await use_cases["booking_actions"].create(
        actor_id=actor_id,
        vehicle_id=payload.vehicle_id,
        start_at=payload.start_at,
        end_at=payload.end_at,
        pickup_location=payload.pickup_location,
        return_location=payload.return_location,
    )
    return BookingResponse.from_entity(unwrap(result))


@router.get("/bookings/mine", response_model=list[BookingResponse])
async def list_my_bookings(actor_id: Actor, use_cases: UseCases) -> list[BookingResponse]:
    result = await use_cases["booking_actions"].list_mine(actor_id)
    return [BookingResponse.from_entity(b) for b in unwrap(result)]


@router.get("/bookings/received", response_model=list[BookingResponse])
async def list_received_bookings(actor_id: Actor, use_cases: UseCases) -> list[BookingResponse]:
    result = await use_cases["booking_actions"].list_received(actor_id)
    return [BookingResponse.from_entity(b) for b in unwrap(result)]


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: str, actor_id: Actor, use_cases: UseCases) -> BookingResponse:
    result = await use_cases["booking_actions"].get(actor_id, booking_id)
    return BookingResponse.from_entity(unwrap(result))


@router.post("/bookings/{booking_id}/approve", response_model=ApproveBookingResponse)
async def approve_booking(booking_id: str, actor_id: Actor, use_cases: UseCases) -> ApproveBookingResponse:
    async def approve():
        return await use_cases["booking_actions"].approve(actor_id, booking_id)

    approval = unwrap(await retry_on_deadlock(approve, max_attempts=3, base_delay=0.1))
    return ApproveBookingResponse(
        booking=BookingResponse.from_entity(approval.booking),
        rejected_booking_ids=approval.rejected_booking_ids,
        warnings=approval.warnings,
    )


@router.post("/bookings/{booking_id}/reject", response_model=BookingResponse)
async def reject_booking(booking_id: str, actor_id: Actor, use_cases: UseCases) -> BookingResponse:
    result = await use_cases["booking_actions"].reject(actor_id, booking_id)
    return BookingResponse.from_entity(unwrap(result))


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(booking_id: str, actor_id: Actor, use_cases: UseCases) -> BookingResponse:
    result = await use_cases["booking_actions"].cancel(actor_id, booking_id)
    return BookingResponse.from_entity(unwrap(result))


@router.post("/bookings/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(booking_id: str, actor_id: Actor, use_cases: UseCases) -> BookingResponse:
    result = await use_cases["booking_actions"].complete(actor_id, booking_id)
    return BookingResponse.from_entity(unwrap(result))


@router.post("/bookings/{booking_id}/reject-competing", response_model=RejectCompetingResponse)
async def reject_competing_bookings(
    booking_id: str, actor_id: Actor, use_cases: UseCases
) -> RejectCompetingResponse:
    """Reintento de la segunda fase de la aprobación; se puede repetir sin efectos extra."""
    result = await use_cases["booking_actions"].reject_competing(actor_id, booking_id)
    return RejectCompetingResponse(booking_id=booking_id, rejected_booking_ids=unwrap(result))


@router.post("/bookings/{booking_id}/payment-intent", response_model=PaymentIntentResponse)
async def issue_payment_intent(
    booking_id: str,
    actor_id: Actor,
    use_cases: UseCases,
    payload: Annotated[PaymentIntentRequest | None, Body()] = None,
) -> PaymentIntentResponse:
    result = await use_cases["payment_actions"].issue_intent(
        actor_id,
        booking_id,
        customer_name=payload.customer_name if payload else None,
    )
    intent = unwrap(result)
    return PaymentIntentResponse(
        booking_id=intent.booking_id,
        order_ref=intent.order_ref,
        order_name=intent.order_name,
        amount=intent.amount,
        customer_name=intent.customer_name,
        success_url=intent.success_url,
        fail_url=intent.fail_url,
    )


@router.get("/bookings/{booking_id}/payment", response_model=PaymentInfoResponse)
async def get_payment_info(booking_id: str, actor_id: Actor, use_cases: UseCases) -> PaymentInfoResponse:
    info = unwrap(await use_cases["payment_actions"].payment_info(actor_id, booking_id))
    return PaymentInfoResponse(
        booking_id=info.booking_id,
        order_ref=info.order_ref,
        transaction_key=info.transaction_key,
        payment_status=info.payment_status,
        amount=info.amount,
        approved_at=info.approved_at,
        is_paid=info.is_paid,
    )
