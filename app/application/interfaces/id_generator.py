"""Interface IdGenerator - Puerto para generación de identificadores de reserva."""

import uuid
from abc import ABC, abstractmethod


class IdGenerator(ABC):
    """
    Puerto para generación de identificadores únicos.

    Permite inyectar implementaciones fake para testing determinista.
    """

    @abstractmethod
    def generate_booking_id(self) -> str:
        """
        Genera el identificador de una reserva nueva.

        Returns:
            String con UUID en formato estándar (xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx).
        """
        raise NotImplementedError


class RealIdGenerator(IdGenerator):
    """Implementación real que genera UUIDs aleatorios."""

    def generate_booking_id(self) -> str:
        return str(uuid.uuid4())


class FakeIdGenerator(IdGenerator):
    """
    Implementación fake para testing.

    Genera valores predecibles para pruebas deterministas.
    """

    def __init__(self) -> None:
        self._counter = 0

    def generate_booking_id(self) -> str:
        """Genera un UUID predecible basado en contador."""
        self._counter += 1
        hex_value = f"{self._counter:032x}"
        return f"{hex_value[:8]}-{hex_value[8:12]}-{hex_value[12:16]}-{hex_value[16:20]}-{hex_value[20:]}"

    def reset(self) -> None:
        self._counter = 0
