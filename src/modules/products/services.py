"""Product service layer (Use Cases).

Orchestrates the menu catalog, delegating persistence to the injected
``IProductRepository``.

Business rules enforced here:
- Product names are unique across the menu.
- Price cannot be negative (validated by DTO).
- Deletion is a soft delete so past order lines keep their reference.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import models, transaction

from modules.products.exceptions import (
    InvalidProductData,
    ProductAlreadyExists,
    ProductNotFound,
)
from modules.products.models import Product, ProductCategory

if TYPE_CHECKING:
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

DEFAULT_FEATURED_LIMIT = 10


class ProductService:
    """Application service for menu use-cases.

    Receives an ``IProductRepository`` via constructor injection.
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Add a product to the menu.

        Raises:
            ProductAlreadyExists: if the name is already taken.
        """
        log = logger.bind(name=dto.name)

        if self._repo.get_by_name(dto.name):
            log.warning("product.duplicate_name")
            raise ProductAlreadyExists(f"Product '{dto.name}' already exists.")

        fields = dto.model_dump(exclude_none=True)
        product = self._repo.save(Product(**fields))
        log.info("product.created", product_id=str(product.id))
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Apply the supplied fields to an existing product.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductAlreadyExists: if the new name belongs to another product.
        """
        product = self._get_or_raise(id)
        changes = dto.changes()

        if "name" in changes:
            clash = self._repo.get_by_name(changes["name"])
            if clash and clash.pk != product.pk:
                raise ProductAlreadyExists(
                    f"Product '{changes['name']}' already exists."
                )

        for field, value in changes.items():
            setattr(product, field, value)

        product = self._repo.save(product)
        logger.info("product.updated", product_id=str(id), fields=sorted(changes))
        return product

    @transaction.atomic
    def set_availability(self, id: str, is_available: bool) -> Product:
        product = self._get_or_raise(id)
        product.is_available = is_available
        product = self._repo.save(product)
        logger.info(
            "product.availability_changed",
            product_id=str(id),
            is_available=is_available,
        )
        return product

    @transaction.atomic
    def set_featured(self, id: str, is_featured: bool) -> Product:
        product = self._get_or_raise(id)
        product.is_featured = is_featured
        product = self._repo.save(product)
        logger.info(
            "product.featured_changed", product_id=str(id), is_featured=is_featured
        )
        return product

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        """Soft-delete a product.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        self._get_or_raise(id)
        self._repo.delete(id)
        logger.info("product.deleted", product_id=str(id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: str) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        return self._get_or_raise(id)

    def list_products(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> models.QuerySet[Product]:
        return self._repo.list(filters)

    def list_by_category(self, category: str) -> models.QuerySet[Product]:
        """Products of one menu category.

        Raises:
            InvalidProductData: if the category is not on the menu.
        """
        if category not in ProductCategory.values:
            raise InvalidProductData(
                f"Unknown category '{category}'. "
                f"Expected one of: {', '.join(ProductCategory.values)}."
            )
        return self._repo.list({"category": category})

    def list_featured(
        self, limit: int = DEFAULT_FEATURED_LIMIT
    ) -> models.QuerySet[Product]:
        if limit < 1:
            raise InvalidProductData("Limit must be a positive integer.")
        return self._repo.featured(limit)

    def search_products(self, query: str) -> models.QuerySet[Product]:
        """Case-insensitive text search over name, description and tags."""
        query = query.strip()
        if not query:
            return self._repo.list()
        return self._repo.search(query)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_or_raise(self, id: str) -> Product:
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product
