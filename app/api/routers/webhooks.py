import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.dependencies import get_use_cases
from app.domain.errors import InvalidPayloadError, InvalidSignatureError
from app.infrastructure.gateways.toss_payment_gateway import SIGNATURE_HEADER

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhooks/payment", status_code=status.HTTP_200_OK)
async def payment_webhook(
    request: Request,
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> dict:
    """
    Notificaciones del gateway de pagos.

    401 por firma inválida y 400 por cuerpo ilegible; los fallos de negocio
    se responden 200 para no provocar reintentos del gateway.
    """
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)
    try:
        return await use_cases["handle_webhook"].execute(raw_body=raw_body, signature=signature)
    except InvalidSignatureError as exc:
        logger.warning("Webhook signature rejected", extra={"reason": exc.reason})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature") from exc
    except InvalidPayloadError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc


@router.get("/webhooks/payment")
async def payment_webhook_status() -> dict:
    return {"status": "ok", "endpoint": "payment-webhook"}
