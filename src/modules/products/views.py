"""Product API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.
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
from modules.products.dtos import (
    AvailabilityDTO,
    CreateProductDTO,
    FeaturedDTO,
    UpdateProductDTO,
)
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import DEFAULT_FEATURED_LIMIT, ProductService


class ProductViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for the menu.

    Uses ``ProductService`` with ``ProductDjangoRepository``.
    All ORM access goes through the service/repository layer.
    """

    filterset_class = ProductFilter
    ordering_fields = ["name", "price", "category", "created_at"]
    ordering = ["name"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    queryset = Product.objects.none()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def get_queryset(self):
        query = self.request.query_params.get("search")
        if query:
            return self._service.search_products(query)
        return self._service.list_products()

    def _paginated(self, queryset) -> Response:
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ProductSerializer(page, many=True).data)
        return responses.success(ProductSerializer(queryset, many=True).data)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        try:
            product = self._service.get_product(pk)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(ProductSerializer(product).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        try:
            dto = CreateProductDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            product = self._service.create_product(dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)

        return responses.success(
            ProductSerializer(product).data, http_status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/products/{pk}/"""
        try:
            dto = UpdateProductDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            product = self._service.update_product(pk, dto)
        except DomainError as exc:
            return responses.from_domain_error(exc)

        return responses.success(ProductSerializer(product).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/"""
        try:
            self._service.delete_product(pk)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Catalog views
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"], url_path=r"category/(?P<category>[^/.]+)")
    def by_category(self, request: Request, category: str | None = None) -> Response:
        """GET /api/v1/products/category/{category}/"""
        try:
            queryset = self._service.list_by_category(category)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return self._paginated(queryset)

    @action(detail=False, methods=["get"], url_path="featured")
    def featured(self, request: Request) -> Response:
        """GET /api/v1/products/featured/?limit=N (default 10)"""
        raw = request.query_params.get("limit", DEFAULT_FEATURED_LIMIT)
        try:
            limit = int(raw)
        except (TypeError, ValueError):
            return responses.fail("Limit must be a positive integer.")

        try:
            products = self._service.list_featured(limit)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(ProductSerializer(products, many=True).data)

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="availability")
    def availability(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/availability/ ``{"is_available": bool}``"""
        try:
            dto = AvailabilityDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            product = self._service.set_availability(pk, dto.is_available)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(ProductSerializer(product).data)

    @action(
        detail=True, methods=["patch"], url_path="featured", url_name="toggle-featured"
    )
    def toggle_featured(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/featured/ ``{"is_featured": bool}``"""
        try:
            dto = FeaturedDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return responses.from_validation_error(exc)

        try:
            product = self._service.set_featured(pk, dto.is_featured)
        except DomainError as exc:
            return responses.from_domain_error(exc)
        return responses.success(ProductSerializer(product).data)
