"""Data Transfer Objects de la capa de aplicación."""

from app.application.dtos.booking_dto import ApprovalResultDTO
from app.application.dtos.payment_dto import PaymentInfoDTO, PaymentIntentDTO

__all__ = [
    "ApprovalResultDTO",
    "PaymentInfoDTO",
    "PaymentIntentDTO",
]
