from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class GatewayConfirmation:
    transaction_key: str
    status: str
    approved_at: datetime | None


class PaymentGateway:
    async def confirm_payment(
        self,
        transaction_key: str,
        order_ref: str,
        amount: int,
    ) -> GatewayConfirmation:
        raise NotImplementedError

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str | None,
    ) -> dict[str, Any]:
        raise NotImplementedError
