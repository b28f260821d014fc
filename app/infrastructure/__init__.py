"""
Capa de Infraestructura - Motor de reservas y conciliación de pagos.

Esta capa contiene las implementaciones concretas de los puertos (interfaces).
Incluye adaptadores para bases de datos y el gateway de pagos.

Estructura:
- db/: Tablas, repositorios SQL, transacciones y reintentos ante deadlock
- gateways/: Adaptador HTTP del gateway de pagos y verificación de webhooks
- in_memory/: Implementaciones in-memory para desarrollo y testing
- circuit_breaker.py: Circuit breaker de las llamadas al gateway
"""

# Database
from app.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from app.infrastructure.db.repositories.payment_anomaly_repo_sql import PaymentAnomalyRepoSQL
from app.infrastructure.db.repositories.payment_event_store_sql import PaymentEventStoreSQL
from app.infrastructure.db.repositories.vehicle_repo_sql import VehicleRepoSQL
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager

# Gateways
from app.infrastructure.gateways.toss_payment_gateway import TossPaymentGateway

# In-Memory (for testing)
from app.infrastructure.in_memory import (
    InMemoryBookingRepo,
    InMemoryPaymentAnomalyRepo,
    InMemoryPaymentEventStore,
    InMemoryPaymentGateway,
    InMemoryTransactionManager,
    InMemoryVehicleRepo,
)

__all__ = [
    # Database - Repositories SQL
    "BookingRepoSQL",
    "VehicleRepoSQL",
    "PaymentEventStoreSQL",
    "PaymentAnomalyRepoSQL",
    "SQLAlchemyTransactionManager",
    # Gateways
    "TossPaymentGateway",
    # In-Memory Implementations
    "InMemoryBookingRepo",
    "InMemoryVehicleRepo",
    "InMemoryPaymentEventStore",
    "InMemoryPaymentAnomalyRepo",
    "InMemoryPaymentGateway",
    "InMemoryTransactionManager",
]
