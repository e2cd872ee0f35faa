"""Customer API views.

Exposes the ``CustomerService`` via HTTP using DRF ViewSets, including
the nested address-book routes. Domain exceptions are translated into
the JSON envelope; the view never swallows generic exceptions.
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
from modules.customers.dtos import (
    AddressDTO,
    CreateCustomerDTO,
    UpdateAddressDTO,
    UpdateCustomerDTO,
)
from modules.customers.filters import CustomerFilter
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.serializers import CustomerSerializer
from modules.customers.services import CustomerService


class CustomerViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Customer CRUD and address management.

    Uses ``CustomerService`` with ``CustomerDjangoRepository``.
    """

    filterset_class = CustomerFilter
    ordering_fields = ["first_name", "last_name", "created_at", "last_order_at"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    queryset = Customer.objects.none()
    serializer_class = CustomerSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CustomerService(repository=CustomerDjangoRepository())

    def get_queryset(self):
        return self._service.list_customers()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}/"""
        try:
            customer = self._service.get_customer(pk)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(CustomerSerializer(customer).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/customers/"""
        try:
            dto = CreateCustomerDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            customer = self._service.create_customer(dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)

        return responses.success(
            CustomerSerializer(customer).data, http_status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/customers/{pk}/"""
        try:
            dto = UpdateCustomerDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            customer = self._service.update_customer(pk, dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)

        return responses.success(CustomerSerializer(customer).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/customers/{pk}/"""
        try:
            self._service.delete_customer(pk)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Address book
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="addresses")
    def add_address(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/customers/{pk}/addresses/"""
        try:
            dto = AddressDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            customer = self._service.add_address(pk, dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)

        return responses.success(
            CustomerSerializer(customer).data, http_status=status.HTTP_201_CREATED
        )

    @action(
        detail=True,
        methods=["put", "patch", "delete"],
        url_path=r"addresses/(?P<address_id>[^/.]+)",
    )
    def address_detail(
        self, request: Request, pk: str | None = None, address_id: str | None = None
    ) -> Response:
        """PUT/PATCH/DELETE /api/v1/customers/{pk}/addresses/{address_id}/"""
        if request.method == "DELETE":
            try:
                customer = self._service.remove_address(pk, address_id)
            except DomainError as exc:
                return responses.from_domain_error(exc)
            return responses.success(CustomerSerializer(customer).data)

        try:
            dto = UpdateAddressDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            customer = self._service.update_address(pk, address_id, dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(CustomerSerializer(customer).data)
