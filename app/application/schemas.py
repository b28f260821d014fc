"""Modelos pydantic de los mensajes que envía el gateway de pagos."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PaymentCancel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    cancel_reason: str | None = Field(default=None, alias="cancelReason")
    canceled_at: datetime | None = Field(default=None, alias="canceledAt")
    cancel_amount: int | None = Field(default=None, alias="cancelAmount")


class PaymentWebhookData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    transaction_key: str | None = Field(default=None, alias="paymentKey")
    order_ref: str = Field(alias="orderId", min_length=1)
    status: str | None = None
    approved_at: datetime | None = Field(default=None, alias="approvedAt")
    total_amount: int | None = Field(default=None, alias="totalAmount")
    cancels: list[PaymentCancel] | None = None

    @field_validator("approved_at")
    @classmethod
    def _to_naive_utc(cls, value: datetime | None) -> datetime | None:
        return _naive_utc(value)

    @property
    def cancelled_amount(self) -> int | None:
        """Suma de los montos cancelados; None si el gateway no informa ninguno."""
        amounts = [c.cancel_amount for c in self.cancels or [] if c.cancel_amount is not None]
        return sum(amounts) if amounts else None


class PaymentWebhookEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    event_type: str | None = Field(default=None, alias="eventType")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    data: PaymentWebhookData

    @field_validator("created_at")
    @classmethod
    def _to_naive_utc(cls, value: datetime | None) -> datetime | None:
        return _naive_utc(value)

    @property
    def status(self) -> str | None:
        """Estado reportado; el de `data` tiene prioridad sobre `eventType`."""
        return self.data.status or self.event_type


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
