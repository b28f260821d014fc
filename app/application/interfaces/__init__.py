"""Interfaces (Puertos) de la capa de aplicación."""

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock, FakeClock, SystemClock
from app.application.interfaces.id_generator import FakeIdGenerator, IdGenerator, RealIdGenerator
from app.application.interfaces.payment_anomaly_repo import PaymentAnomalyRepo
from app.application.interfaces.payment_event_store import PaymentEventStore, ProcessedPaymentEvent
from app.application.interfaces.payment_gateway import GatewayConfirmation, PaymentGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.vehicle_repo import VehicleRepo

__all__ = [
    # Repositories
    "BookingRepo",
    "VehicleRepo",
    "PaymentEventStore",
    "ProcessedPaymentEvent",
    "PaymentAnomalyRepo",
    # Gateways
    "PaymentGateway",
    "GatewayConfirmation",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "IdGenerator",
    "RealIdGenerator",
    "FakeIdGenerator",
]
