"""Value Object DateRange - rango semiabierto [start, end) de una reserva."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class DateRange:
    """
    Value Object inmutable que representa un rango de fechas/horas semiabierto.

    El extremo final no pertenece al rango: una reserva que termina a las 10:00
    no se solapa con otra que empieza a las 10:00.

    Attributes:
        start: Fecha/hora de inicio (entrega del vehículo).
        end: Fecha/hora de fin (devolución del vehículo).
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(
                f"start debe ser anterior a end: {self.start} >= {self.end}"
            )

    @property
    def duration(self) -> timedelta:
        """Retorna la duración del rango."""
        return self.end - self.start

    @property
    def billable_days(self) -> int:
        """
        Calcula los días cobrables.

        Regla de negocio: cualquier fracción de día cuenta como día completo,
        con un mínimo de un día. Ejemplo: 3 horas = 1 día, 49 horas = 3 días.
        """
        days = math.ceil(self.duration.total_seconds() / SECONDS_PER_DAY)
        return max(1, days)

    def overlaps_with(self, other: "DateRange") -> bool:
        """Verifica si este rango se superpone con otro (s1 < e2 y s2 < e1)."""
        return self.start < other.end and other.start < self.end

    def is_within(self, window_start: datetime, window_end: datetime) -> bool:
        """Verifica si el rango cabe completo dentro de una ventana [inicio, fin]."""
        return window_start <= self.start and self.end <= window_end

    def __str__(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"
