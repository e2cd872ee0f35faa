import itertools
from datetime import date
from decimal import Decimal

import pytest

from rest_framework.test import APIClient

from modules.couriers.models import Courier, DocumentType, VehicleType
from modules.customers.models import Customer
from modules.orders.dtos import CreateOrderDTO
from modules.orders.views import build_order_service
from modules.products.models import Product, ProductCategory

ADDRESS = {"street": "Av. Larco", "number": "345", "district": "Miraflores"}

_sequence = itertools.count(1)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "delivery-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Domain factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product():
    """Persist a Product; every call gets a unique name unless one is given."""

    def _make(**overrides) -> Product:
        n = next(_sequence)
        fields = {
            "name": f"Plato {n}",
            "description": "Plato de la casa",
            "price": Decimal("10.00"),
            "category": ProductCategory.MAINS,
        }
        fields.update(overrides)
        return Product.objects.create(**fields)

    return _make


@pytest.fixture()
def make_customer():
    def _make(**overrides) -> Customer:
        n = next(_sequence)
        fields = {
            "first_name": "Ana",
            "last_name": "Quispe",
            "email": f"ana{n}@example.com",
            "phone": "987654321",
        }
        fields.update(overrides)
        return Customer.objects.create(**fields)

    return _make


@pytest.fixture()
def make_courier():
    def _make(**overrides) -> Courier:
        n = next(_sequence)
        fields = {
            "first_name": "Luis",
            "last_name": "Paredes",
            "email": f"luis{n}@couriers.example.com",
            "phone": "912345678",
            "document_type": DocumentType.DNI,
            "document_number": f"{n:08d}",
            "birth_date": date(1992, 5, 17),
            "vehicle_type": VehicleType.MOTORCYCLE,
            "coverage_zones": ["Miraflores"],
        }
        fields.update(overrides)
        return Courier.objects.create(**fields)

    return _make


@pytest.fixture()
def product(make_product):
    """An available S/ 10.00 product."""
    return make_product()


@pytest.fixture()
def customer(make_customer):
    return make_customer()


@pytest.fixture()
def courier(make_courier):
    """An available courier covering Miraflores."""
    return make_courier()


@pytest.fixture()
def order_service():
    return build_order_service()


@pytest.fixture()
def make_order(order_service, customer, product):
    """Create an order through the service (2 x S/ 10.00 by default)."""

    def _make(quantity: int = 2, **overrides):
        payload = {
            "customer_id": customer.id,
            "items": [{"product_id": product.id, "quantity": quantity}],
            "delivery_address": ADDRESS,
        }
        payload.update(overrides)
        return order_service.create_order(CreateOrderDTO.model_validate(payload))

    return _make
