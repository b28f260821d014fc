"""Value Objects del dominio de reservas."""

from app.domain.value_objects.date_range import DateRange
from app.domain.value_objects.order_ref import OrderRef

__all__ = [
    "DateRange",
    "OrderRef",
]
