"""
Capa de Aplicación - Motor de reservas y conciliación de pagos.

Esta capa contiene los casos de uso, DTOs e interfaces (puertos).
Orquesta la lógica de negocio y define los contratos con la infraestructura.

Estructura:
- use_cases/: Casos de uso del sistema
- services/: Availability Checker
- dtos/: Data Transfer Objects
- interfaces/: Puertos (contratos para adaptadores)
- actions.py: Frontera ActionResult hacia la presentación
- schemas.py: Schemas Pydantic de los mensajes del gateway
"""

from app.application.dtos import ApprovalResultDTO, PaymentInfoDTO, PaymentIntentDTO
from app.application.interfaces import (
    BookingRepo,
    Clock,
    FakeClock,
    FakeIdGenerator,
    GatewayConfirmation,
    IdGenerator,
    PaymentAnomalyRepo,
    PaymentEventStore,
    PaymentGateway,
    ProcessedPaymentEvent,
    RealIdGenerator,
    SystemClock,
    TransactionManager,
    VehicleRepo,
)

__all__ = [
    # DTOs
    "ApprovalResultDTO",
    "PaymentInfoDTO",
    "PaymentIntentDTO",
    # Interfaces - Repositories
    "BookingRepo",
    "VehicleRepo",
    "PaymentEventStore",
    "ProcessedPaymentEvent",
    "PaymentAnomalyRepo",
    # Interfaces - Gateways
    "PaymentGateway",
    "GatewayConfirmation",
    # Interfaces - Infrastructure
    "TransactionManager",
    # Interfaces - Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "IdGenerator",
    "RealIdGenerator",
    "FakeIdGenerator",
]
