"""
Integration tests.

Cubren los adaptadores de infraestructura contra SQLite in-memory:
- Repositorios SQL y flujo completo reserva -> aprobación -> pago
- Reintento ante deadlocks
"""
