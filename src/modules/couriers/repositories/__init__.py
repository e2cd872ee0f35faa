"""Courier repositories package."""

from modules.couriers.repositories.django_repository import CourierDjangoRepository
from modules.couriers.repositories.interfaces import ICourierRepository

__all__ = ["CourierDjangoRepository", "ICourierRepository"]
