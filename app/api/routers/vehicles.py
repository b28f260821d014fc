from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_use_cases
from app.api.results import unwrap
from app.api.schemas.bookings import AvailabilityResponse, to_naive_utc

router = APIRouter()


@router.get("/vehicles/{vehicle_id}/availability", response_model=AvailabilityResponse)
async def vehicle_availability(
    vehicle_id: str,
    use_cases: Annotated[dict, Depends(get_use_cases)],
    start: datetime = Query(...),
    end: datetime = Query(...),
) -> AvailabilityResponse:
    start, end = to_naive_utc(start), to_naive_utc(end)
    result = await use_cases["booking_actions"].is_available(vehicle_id, start, end)
    return AvailabilityResponse(vehicle_id=vehicle_id, start=start, end=end, available=unwrap(result))
