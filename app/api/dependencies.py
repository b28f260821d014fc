from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AsyncSessionLocal
from app.application.actions import BookingActions, PaymentActions
from app.application.interfaces.clock import Clock, SystemClock
from app.application.interfaces.id_generator import RealIdGenerator
from app.application.interfaces.payment_gateway import PaymentGateway
from app.application.services.availability import AvailabilityChecker
from app.application.use_cases.approve_booking import ApproveBookingUseCase
from app.application.use_cases.cancel_booking import CancelBookingUseCase
from app.application.use_cases.complete_booking import CompleteBookingUseCase
from app.application.use_cases.confirm_payment import ConfirmPaymentUseCase
from app.application.use_cases.create_booking import CreateBookingUseCase
from app.application.use_cases.handle_payment_failure import HandlePaymentFailureUseCase
from app.application.use_cases.handle_payment_webhook import HandlePaymentWebhookUseCase
from app.application.use_cases.issue_payment_intent import IssuePaymentIntentUseCase
from app.application.use_cases.purge_payment_events import PurgePaymentEventsUseCase
from app.application.use_cases.query_bookings import (
    GetBookingUseCase,
    GetPaymentInfoUseCase,
    ListMyBookingsUseCase,
    ListReceivedBookingsUseCase,
)
from app.application.use_cases.reconcile_payment import ReconcilePaymentUseCase
from app.application.use_cases.reject_booking import RejectBookingUseCase
from app.application.use_cases.reject_competing_bookings import RejectCompetingBookingsUseCase
from app.config import Settings, get_settings
from app.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from app.infrastructure.db.repositories.payment_anomaly_repo_sql import PaymentAnomalyRepoSQL
from app.infrastructure.db.repositories.payment_event_store_sql import PaymentEventStoreSQL
from app.infrastructure.db.repositories.vehicle_repo_sql import VehicleRepoSQL
from app.infrastructure.db.seed import DEMO_VEHICLES
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.gateways.toss_payment_gateway import TossPaymentGateway
from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.payment_anomaly_repo import InMemoryPaymentAnomalyRepo
from app.infrastructure.in_memory.payment_event_store import InMemoryPaymentEventStore
from app.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager
from app.infrastructure.in_memory.vehicle_repo import InMemoryVehicleRepo


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        yield session


def get_actor_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str | None:
    """Identidad provista por la capa de autenticación externa; None si no hay sesión."""
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None


def build_payment_gateway(settings: Settings, clock: Clock) -> PaymentGateway:
    if settings.toss_secret_key:
        return TossPaymentGateway(
            secret_key=settings.toss_secret_key,
            api_url=settings.toss_api_url,
            timeout_seconds=settings.toss_timeout_seconds,
        )
    return StubPaymentGateway(clock=clock)


@lru_cache(maxsize=1)
def _in_memory_bundle():
    clock = SystemClock()
    vehicle_repo = InMemoryVehicleRepo()
    for vehicle in DEMO_VEHICLES:
        vehicle_repo.add(vehicle)
    return {
        "clock": clock,
        "id_generator": RealIdGenerator(),
        "vehicle_repo": vehicle_repo,
        "booking_repo": InMemoryBookingRepo(vehicle_repo=vehicle_repo),
        "event_store": InMemoryPaymentEventStore(),
        "anomaly_repo": InMemoryPaymentAnomalyRepo(),
        "tx_manager": NoopTransactionManager(),
        "payment_gateway": build_payment_gateway(get_settings(), clock),
    }


def build_use_cases(bundle: dict, settings: Settings) -> dict:
    """Arma los casos de uso sobre un conjunto de adaptadores (memoria o SQL)."""
    booking_repo = bundle["booking_repo"]
    vehicle_repo = bundle["vehicle_repo"]
    tx_manager = bundle["tx_manager"]
    clock = bundle["clock"]

    availability_checker = AvailabilityChecker(booking_repo=booking_repo)
    reject_competing = RejectCompetingBookingsUseCase(
        booking_repo=booking_repo,
        vehicle_repo=vehicle_repo,
        transaction_manager=tx_manager,
        clock=clock,
    )
    get_booking = GetBookingUseCase(booking_repo=booking_repo, vehicle_repo=vehicle_repo)
    reconciler = ReconcilePaymentUseCase(
        booking_repo=booking_repo,
        event_store=bundle["event_store"],
        anomaly_repo=bundle["anomaly_repo"],
        transaction_manager=tx_manager,
        clock=clock,
        retention_seconds=settings.payment_event_retention_seconds,
    )

    booking_actions = BookingActions(
        create_booking=CreateBookingUseCase(
            booking_repo=booking_repo,
            vehicle_repo=vehicle_repo,
            availability_checker=availability_checker,
            transaction_manager=tx_manager,
            id_generator=bundle["id_generator"],
            clock=clock,
        ),
        approve_booking=ApproveBookingUseCase(
            booking_repo=booking_repo,
            vehicle_repo=vehicle_repo,
            availability_checker=availability_checker,
            reject_competing=reject_competing,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        reject_booking=RejectBookingUseCase(
            booking_repo=booking_repo,
            vehicle_repo=vehicle_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        cancel_booking=CancelBookingUseCase(
            booking_repo=booking_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        complete_booking=CompleteBookingUseCase(
            booking_repo=booking_repo,
            vehicle_repo=vehicle_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        reject_competing=reject_competing,
        get_booking=get_booking,
        list_my_bookings=ListMyBookingsUseCase(booking_repo=booking_repo),
        list_received_bookings=ListReceivedBookingsUseCase(booking_repo=booking_repo),
        availability_checker=availability_checker,
    )
    payment_actions = PaymentActions(
        issue_payment_intent=IssuePaymentIntentUseCase(
            booking_repo=booking_repo,
            vehicle_repo=vehicle_repo,
            transaction_manager=tx_manager,
            clock=clock,
            app_base_url=settings.app_base_url,
        ),
        confirm_payment=ConfirmPaymentUseCase(
            booking_repo=booking_repo,
            payment_gateway=bundle["payment_gateway"],
            reconciler=reconciler,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        handle_payment_failure=HandlePaymentFailureUseCase(reconciler=reconciler, clock=clock),
        get_payment_info=GetPaymentInfoUseCase(get_booking=get_booking),
    )

    return {
        "booking_actions": booking_actions,
        "payment_actions": payment_actions,
        "handle_webhook": HandlePaymentWebhookUseCase(
            payment_gateway=bundle["payment_gateway"],
            reconciler=reconciler,
            webhook_secret=settings.toss_webhook_secret,
            clock=clock,
        ),
        "purge_payment_events": PurgePaymentEventsUseCase(
            event_store=bundle["event_store"],
            transaction_manager=tx_manager,
            clock=clock,
        ),
    }


def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
):
    if settings.use_in_memory:
        return build_use_cases(_in_memory_bundle(), settings)

    if not session:
        raise RuntimeError("DB session not available")

    clock = SystemClock()
    bundle = {
        "clock": clock,
        "id_generator": RealIdGenerator(),
        "vehicle_repo": VehicleRepoSQL(session),
        "booking_repo": BookingRepoSQL(session),
        "event_store": PaymentEventStoreSQL(session),
        "anomaly_repo": PaymentAnomalyRepoSQL(session),
        "tx_manager": SQLAlchemyTransactionManager(session),
        "payment_gateway": build_payment_gateway(settings, clock),
    }
    return build_use_cases(bundle, settings)
