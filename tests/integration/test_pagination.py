"""Integration tests for the paginated list envelope."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.products.models import Product, ProductCategory

pytestmark = pytest.mark.integration


@pytest.fixture()
def menu_batch():
    """Create a batch of products for pagination tests."""
    Product.objects.bulk_create(
        [
            Product(
                name=f"Plato {idx:03d}",
                description="Plato del día",
                price=Decimal("9.90"),
                category=ProductCategory.MAINS,
            )
            for idx in range(1, 46)
        ]
    )


class TestPagination:
    def test_default_page_size(self, api_client, menu_batch):
        response = api_client.get("/api/v1/products/")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["count"] == 45
        assert len(body["data"]) == 20
        assert body["next"] is not None
        assert body["previous"] is None

    def test_last_page(self, api_client, menu_batch):
        body = api_client.get("/api/v1/products/", {"page": 3}).json()
        assert len(body["data"]) == 5
        assert body["next"] is None
        assert body["previous"] is not None

    def test_custom_page_size_is_capped(self, api_client, menu_batch):
        body = api_client.get("/api/v1/products/", {"page_size": 500}).json()
        assert len(body["data"]) == 45

    def test_page_out_of_range(self, api_client, menu_batch):
        response = api_client.get("/api/v1/products/", {"page": 99})
        assert response.status_code == 404
        assert response.json()["status"] == "fail"

    def test_ordering(self, api_client, menu_batch):
        body = api_client.get("/api/v1/products/", {"ordering": "-name"}).json()
        assert body["data"][0]["name"] == "Plato 045"
