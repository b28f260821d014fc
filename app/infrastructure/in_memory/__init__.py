"""Implementaciones in-memory para desarrollo y testing."""

from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.payment_anomaly_repo import InMemoryPaymentAnomalyRepo
from app.infrastructure.in_memory.payment_event_store import InMemoryPaymentEventStore
from app.infrastructure.in_memory.payment_gateway import StubPaymentGateway as InMemoryPaymentGateway
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager as InMemoryTransactionManager
from app.infrastructure.in_memory.vehicle_repo import InMemoryVehicleRepo

__all__ = [
    # Repositories
    "InMemoryBookingRepo",
    "InMemoryVehicleRepo",
    "InMemoryPaymentEventStore",
    "InMemoryPaymentAnomalyRepo",
    # Gateways
    "InMemoryPaymentGateway",
    # Infrastructure
    "InMemoryTransactionManager",
]
