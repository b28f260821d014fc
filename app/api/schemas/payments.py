from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, constr


class PaymentIntentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    customer_name: constr(strip_whitespace=True, min_length=1, max_length=100) | None = None


class PaymentIntentResponse(BaseModel):
    booking_id: str
    order_ref: str
    order_name: str
    amount: int
    customer_name: str
    success_url: str
    fail_url: str


class ConfirmPaymentRequest(BaseModel):
    """Parámetros con los que el gateway redirige al éxito del checkout."""

    transaction_key: str = Field(
        min_length=1,
        validation_alias=AliasChoices("transaction_key", "transactionKey", "paymentKey"),
    )
    order_ref: str = Field(
        min_length=1,
        validation_alias=AliasChoices("order_ref", "orderRef", "orderId"),
    )
    amount: int = Field(gt=0)


class PaymentFailureRequest(BaseModel):
    order_ref: str = Field(
        min_length=1,
        validation_alias=AliasChoices("order_ref", "orderRef", "orderId"),
    )
    error_code: str = Field(default="UNKNOWN", validation_alias=AliasChoices("error_code", "code"))
    error_message: str = Field(default="", validation_alias=AliasChoices("error_message", "message"))


class PaymentOutcomeResponse(BaseModel):
    booking_id: str
    payment_status: str
    result: str


class PaymentInfoResponse(BaseModel):
    booking_id: str
    order_ref: str | None = None
    transaction_key: str | None = None
    payment_status: str
    amount: int
    approved_at: datetime | None = None
    is_paid: bool
