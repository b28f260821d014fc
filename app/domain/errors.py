"""Excepciones de dominio para el motor de reservas y pagos."""


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de Reserva ===


class NotFoundError(DomainError):
    """La entidad solicitada no existe."""

    def __init__(self, entity: str, identifier: str):
        super().__init__(
            message=f"{entity} no encontrado: {identifier}",
            code="NOT_FOUND",
        )
        self.entity = entity
        self.identifier = identifier


class ForbiddenError(DomainError):
    """El actor no tiene permiso para la operación."""

    def __init__(self, actor_id: str, operation: str):
        super().__init__(
            message=f"El usuario {actor_id} no puede {operation}",
            code="FORBIDDEN",
        )
        self.actor_id = actor_id
        self.operation = operation


class InvalidStateError(DomainError):
    """El estado actual (reserva o pago) no permite la operación."""

    def __init__(self, current_status: str, expected_status: str | list[str], operation: str):
        expected = expected_status if isinstance(expected_status, str) else ", ".join(expected_status)
        super().__init__(
            message=f"No se puede {operation}: estado actual '{current_status}', esperado '{expected}'",
            code="INVALID_STATE",
        )
        self.current_status = current_status
        self.expected_status = expected_status
        self.operation = operation


class InvalidRangeError(DomainError):
    """Rango de fechas mal formado o fuera de la ventana de disponibilidad."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_RANGE")


class ConflictError(DomainError):
    """Solapamiento con una reserva aprobada o aprobación concurrente perdida."""

    def __init__(self, vehicle_id: str, message: str | None = None):
        super().__init__(
            message=message or f"El vehículo {vehicle_id} ya tiene una reserva aprobada en ese rango",
            code="CONFLICT",
        )
        self.vehicle_id = vehicle_id


# === Errores de Pago ===


class AmountMismatchError(DomainError):
    """El monto declarado no coincide con el total de la reserva."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            message=f"Monto no coincide: esperado {expected}, recibido {actual}",
            code="AMOUNT_MISMATCH",
        )
        self.expected = expected
        self.actual = actual


class AlreadyPaidError(DomainError):
    """La reserva ya fue pagada."""

    def __init__(self, booking_id: str):
        super().__init__(
            message=f"La reserva {booking_id} ya fue pagada",
            code="ALREADY_PAID",
        )
        self.booking_id = booking_id


class PaymentGatewayError(DomainError):
    """El gateway de pagos rechazó la operación o no respondió."""

    def __init__(self, gateway_code: str, gateway_message: str, http_status: int | None = None):
        super().__init__(
            message=f"Error del gateway de pagos ({gateway_code}): {gateway_message}",
            code="PAYMENT_GATEWAY_ERROR",
        )
        self.gateway_code = gateway_code
        self.gateway_message = gateway_message
        self.http_status = http_status


# === Errores de Autenticación ===


class UnauthenticatedError(DomainError):
    """No hay un actor autenticado en la petición."""

    def __init__(self):
        super().__init__(message="Se requiere iniciar sesión", code="UNAUTHENTICATED")


class InvalidSignatureError(DomainError):
    """La firma del webhook no es válida."""

    def __init__(self, reason: str):
        super().__init__(message=f"Firma de webhook inválida: {reason}", code="INVALID_SIGNATURE")
        self.reason = reason


class InvalidPayloadError(DomainError):
    """El cuerpo del webhook no se pudo interpretar."""

    def __init__(self, reason: str):
        super().__init__(message=f"Payload de webhook inválido: {reason}", code="INVALID_PAYLOAD")
        self.reason = reason
