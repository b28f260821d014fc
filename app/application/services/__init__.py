"""Servicios de aplicación compartidos por varios casos de uso."""

from app.application.services.availability import AvailabilityChecker

__all__ = [
    "AvailabilityChecker",
]
