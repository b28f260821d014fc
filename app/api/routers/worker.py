from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_use_cases
from app.infrastructure.db.retry import retry_on_deadlock

router = APIRouter()


@router.post(
    "/workers/payment-events/purge",
    status_code=status.HTTP_200_OK,
)
async def purge_payment_events(
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> dict:
    """
    Evict payment dedup entries older than the retention window.

    Safe to call from several schedulers at once; retried on deadlock.
    """
    purged = await retry_on_deadlock(use_cases["purge_payment_events"].execute, max_attempts=3, base_delay=0.1)
    return {"purged": purged}
