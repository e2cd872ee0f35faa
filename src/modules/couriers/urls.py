"""Courier fleet URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.couriers.views import CourierViewSet

router = DefaultRouter(trailing_slash=True)
router.register("couriers", CourierViewSet, basename="courier")

urlpatterns = router.urls
