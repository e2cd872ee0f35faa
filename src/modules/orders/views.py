"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into the JSON envelope;
the view never swallows generic exceptions.
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
from modules.couriers.repositories.django_repository import CourierDjangoRepository
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.dtos import (
    AssignCourierDTO,
    CancelOrderDTO,
    CreateOrderDTO,
    RateOrderDTO,
    StatusDTO,
    UpdateOrderDTO,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer, OrderSerializer
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository


def build_order_service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        courier_repository=CourierDjangoRepository(),
    )


class OrderViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for the order lifecycle.

    Uses ``OrderService`` with injected repositories.  All ORM access
    goes through the service/repository layer.
    """

    queryset = Order.objects.none()
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_queryset(self):
        return self._service.list_orders()

    def get_serializer_class(self):
        if self.action in {"list", "by_customer", "by_courier", "by_status"}:
            return OrderListSerializer
        return OrderSerializer

    def _paginated(self, queryset) -> Response:
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(
                OrderListSerializer(page, many=True).data
            )
        return responses.success(OrderListSerializer(queryset, many=True).data)

    def _respond(self, order: Order, http_status: int = status.HTTP_200_OK) -> Response:
        return responses.success(OrderSerializer(order).data, http_status=http_status)

    # ------------------------------------------------------------------
    # Create / Retrieve / Update
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        try:
            dto = CreateOrderDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            order = self._service.create_order(dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)

        return self._respond(order, http_status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return self._respond(order)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/orders/{pk}/"""
        try:
            dto = UpdateOrderDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            order = self._service.update_order(pk, dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return self._respond(order)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"], url_path=r"customer/(?P<customer_id>[^/.]+)")
    def by_customer(self, request: Request, customer_id: str | None = None) -> Response:
        """GET /api/v1/orders/customer/{customer_id}/"""
        try:
            queryset = self._service.list_by_customer(customer_id)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return self._paginated(queryset)

    @action(detail=False, methods=["get"], url_path=r"courier/(?P<courier_id>[^/.]+)")
    def by_courier(self, request: Request, courier_id: str | None = None) -> Response:
        """GET /api/v1/orders/courier/{courier_id}/"""
        try:
            queryset = self._service.list_by_courier(courier_id)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return self._paginated(queryset)

    @action(detail=False, methods=["get"], url_path=r"status/(?P<order_status>[^/.]+)")
    def by_status(self, request: Request, order_status: str | None = None) -> Response:
        """GET /api/v1/orders/status/{status}/"""
        try:
            queryset = self._service.list_by_status(order_status)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return self._paginated(queryset)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/status/ ``{"status": "..."}``"""
        try:
            dto = StatusDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            order = self._service.update_status(pk, dto.status)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return self._respond(order)

    @action(detail=True, methods=["patch"], url_path="courier")
    def assign_courier(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/courier/ ``{"courier_id": "..."}``"""
        try:
            dto = AssignCourierDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            order = self._service.assign_courier(pk, str(dto.courier_id))
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return self._respond(order)

    @action(detail=True, methods=["patch"], url_path="rating")
    def rate(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/rating/ ``{"score": 1-5, "comment": "..."}``"""
        try:
            dto = RateOrderDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            order = self._service.rate_order(pk, dto.score, dto.comment)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return self._respond(order)

    @action(detail=True, methods=["patch"], url_path="cancel")
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/cancel/ ``{"reason": "..."}``"""
        try:
            dto = CancelOrderDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            order = self._service.cancel_order(pk, dto.reason)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return self._respond(order)
