"""Courier API views.

Exposes the ``CourierService`` via HTTP using DRF ViewSets.
Domain exceptions are translated into the JSON envelope; the view never
swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core import responses
from modules.core.exceptions import DomainError
from modules.couriers.dtos import (
    AvailabilityDTO,
    CreateCourierDTO,
    LocationDTO,
    UpdateCourierDTO,
    ZonesDTO,
)
from modules.couriers.filters import CourierFilter
from modules.couriers.models import Courier
from modules.couriers.repositories.django_repository import CourierDjangoRepository
from modules.couriers.serializers import CourierSerializer
from modules.couriers.services import CourierService
from modules.orders.repositories.django_repository import OrderDjangoRepository


class CourierViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for the courier fleet.

    Uses ``CourierService`` with ``CourierDjangoRepository`` and
    ``OrderDjangoRepository``.
    """

    filterset_class = CourierFilter
    ordering_fields = ["rating", "total_deliveries", "last_name", "created_at"]
    ordering = ["-rating", "last_name"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    queryset = Courier.objects.none()
    serializer_class = CourierSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CourierService(
            repository=CourierDjangoRepository(),
            order_repository=OrderDjangoRepository(),
        )

    def get_queryset(self):
        return self._service.list_couriers()

    def _paginated(self, queryset) -> Response:
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(CourierSerializer(page, many=True).data)
        return responses.success(CourierSerializer(queryset, many=True).data)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/couriers/{pk}/"""
        try:
            courier = self._service.get_courier(pk)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(CourierSerializer(courier).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/couriers/"""
        try:
            dto = CreateCourierDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            courier = self._service.create_courier(dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)

        return responses.success(
            CourierSerializer(courier).data, http_status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/couriers/{pk}/"""
        try:
            dto = UpdateCourierDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            courier = self._service.update_courier(pk, dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(CourierSerializer(courier).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/couriers/{pk}/ (refused while orders are active)"""
        try:
            self._service.delete_courier(pk)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Dispatch look-ups
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"], url_path="available")
    def available(self, request: Request) -> Response:
        """GET /api/v1/couriers/available/?zones=a,b"""
        raw = request.query_params.get("zones", "")
        zones = [zone for zone in raw.split(",") if zone.strip()]
        return self._paginated(self._service.list_available(zones))

    @action(detail=False, methods=["get"], url_path=r"zone/(?P<zone>[^/]+)")
    def by_zone(self, request: Request, zone: str | None = None) -> Response:
        """GET /api/v1/couriers/zone/{zone}/"""
        return self._paginated(self._service.list_by_zone(zone))

    @action(detail=True, methods=["get"], url_path="stats")
    def stats(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/couriers/{pk}/stats/"""
        try:
            stats = self._service.get_stats(pk)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(stats.as_dict())

    # ------------------------------------------------------------------
    # Field updates
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="availability")
    def availability(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/couriers/{pk}/availability/ ``{"is_available": bool}``"""
        try:
            dto = AvailabilityDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            courier = self._service.set_availability(pk, dto.is_available)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(CourierSerializer(courier).data)

    @action(detail=True, methods=["patch"], url_path="location")
    def location(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/couriers/{pk}/location/ ``{"lat": .., "lng": ..}``"""
        try:
            dto = LocationDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            courier = self._service.update_location(pk, dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(CourierSerializer(courier).data)

    @action(detail=True, methods=["patch"], url_path="zones")
    def zones(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/couriers/{pk}/zones/ ``{"coverage_zones": [...]}``"""
        try:
            dto = ZonesDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            courier = self._service.update_zones(pk, dto.coverage_zones)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(CourierSerializer(courier).data)
