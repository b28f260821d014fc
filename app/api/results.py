from typing import TypeVar

from fastapi import HTTPException, status

from app.application.actions import ActionResult

T = TypeVar("T")

STATUS_BY_CODE = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "INVALID_STATE": status.HTTP_409_CONFLICT,
    "ALREADY_PAID": status.HTTP_409_CONFLICT,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "INVALID_RANGE": 422,
    "AMOUNT_MISMATCH": 422,
    "UNAUTHENTICATED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_SIGNATURE": status.HTTP_401_UNAUTHORIZED,
    "INVALID_PAYLOAD": status.HTTP_400_BAD_REQUEST,
    "PAYMENT_GATEWAY_ERROR": status.HTTP_502_BAD_GATEWAY,
}


def unwrap(result: ActionResult[T]) -> T:
    """Devuelve el dato de una acción exitosa o la traduce a HTTPException."""
    if result.success:
        return result.data
    raise HTTPException(
        status_code=STATUS_BY_CODE.get(result.code or "", status.HTTP_400_BAD_REQUEST),
        detail={"code": result.code, "message": result.error},
    )
