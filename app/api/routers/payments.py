from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import get_use_cases
from app.api.results import unwrap
from app.api.schemas.payments import (
    ConfirmPaymentRequest,
    PaymentFailureRequest,
    PaymentOutcomeResponse,
)

router = APIRouter()


@router.post("/payments/confirm", response_model=PaymentOutcomeResponse)
async def confirm_payment(
    payload: ConfirmPaymentRequest,
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> PaymentOutcomeResponse:
    result = await use_cases["payment_actions"].confirm(
        transaction_key=payload.transaction_key,
        order_ref=payload.order_ref,
        amount=payload.amount,
    )
    return PaymentOutcomeResponse(**unwrap(result).to_dict())


@router.post("/payments/fail", response_model=PaymentOutcomeResponse)
async def payment_failed(
    payload: PaymentFailureRequest,
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> PaymentOutcomeResponse:
    result = await use_cases["payment_actions"].fail(
        order_ref=payload.order_ref,
        error_code=payload.error_code,
        error_message=payload.error_message,
    )
    return PaymentOutcomeResponse(**unwrap(result).to_dict())
