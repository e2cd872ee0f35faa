from __future__ import annotations

import random
from datetime import date
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.couriers.models import Courier, DocumentType, VehicleType
from modules.customers.models import Customer
from modules.orders.constants import OrderStatus, PaymentMethod
from modules.orders.dtos import CreateOrderDTO
from modules.orders.models import Order
from modules.orders.views import build_order_service
from modules.products.models import Product, ProductCategory


class Command(BaseCommand):
    help = "Seed database with a demo menu, customers, couriers and orders."

    def add_arguments(self, parser):
        parser.add_argument(
            "--orders",
            type=int,
            default=20,
            help="Number of demo orders to create when none exist yet.",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        products = self._seed_products()
        customers = self._seed_customers()
        couriers = self._seed_couriers()
        orders_created = self._seed_orders(
            customers, products, couriers, options["orders"]
        )

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"products={len(products)}, "
                f"customers={len(customers)}, "
                f"couriers={len(couriers)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating menu...")
        menu = [
            ("Ceviche clásico", ProductCategory.STARTERS, "28.00", ["pescado", "limón"]),
            ("Causa limeña", ProductCategory.STARTERS, "18.00", ["papa", "pollo"]),
            ("Papa a la huancaína", ProductCategory.STARTERS, "15.00", ["papa", "queso"]),
            ("Lomo saltado", ProductCategory.MAINS, "35.00", ["res", "wok"]),
            ("Ají de gallina", ProductCategory.MAINS, "27.00", ["pollo", "ají"]),
            ("Arroz con mariscos", ProductCategory.MAINS, "38.00", ["mariscos"]),
            ("Tallarines verdes", ProductCategory.MAINS, "24.00", ["pasta", "albahaca"]),
            ("Suspiro limeño", ProductCategory.DESSERTS, "12.00", ["dulce"]),
            ("Picarones", ProductCategory.DESSERTS, "10.00", ["camote", "miel"]),
            ("Chicha morada", ProductCategory.DRINKS, "8.00", ["maíz morado"]),
            ("Inca Kola 500ml", ProductCategory.DRINKS, "5.00", ["gaseosa"]),
            ("Yuca frita", ProductCategory.SIDES, "9.00", ["yuca"]),
        ]
        products: list[Product] = []
        for index, (name, category, price, tags) in enumerate(menu):
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={
                    "description": f"{name} de la casa.",
                    "price": Decimal(price),
                    "category": category,
                    "tags": tags,
                    "is_featured": index % 4 == 0,
                    "preparation_minutes": random.randint(5, 30),
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating menu... Done!"))
        return products

    def _seed_customers(self) -> list[Customer]:
        self.stdout.write("Creating customers...")
        people = [
            ("Ana", "Quispe", "Miraflores"),
            ("Bruno", "Mendoza", "San Isidro"),
            ("Carla", "Huamán", "Barranco"),
            ("Diego", "Flores", "Surco"),
            ("Elena", "Rojas", "Miraflores"),
            ("Fabio", "Torres", "Lince"),
        ]
        customers: list[Customer] = []
        for index, (first, last, district) in enumerate(people):
            customer, created = Customer.objects.get_or_create(
                email=f"{first.lower()}.{last.lower()}@example.com",
                defaults={
                    "first_name": first,
                    "last_name": last,
                    "phone": f"9{index:02d}555{index:03d}",
                },
            )
            if created:
                customer.add_address(
                    {
                        "street": "Av. Larco",
                        "number": str(100 + index * 10),
                        "district": district,
                        "city": "Lima",
                        "is_default": True,
                    }
                )
                customer.save(update_fields=["addresses"])
            customers.append(customer)
        self.stdout.write(self.style.SUCCESS("Creating customers... Done!"))
        return customers

    def _seed_couriers(self) -> list[Courier]:
        self.stdout.write("Creating couriers...")
        fleet = [
            ("Luis", "Paredes", VehicleType.MOTORCYCLE, ["Miraflores", "San Isidro"]),
            ("María", "Castro", VehicleType.BICYCLE, ["Barranco", "Miraflores"]),
            ("Jorge", "Salas", VehicleType.CAR, ["Surco", "Lince", "San Isidro"]),
            ("Rosa", "Vega", VehicleType.MOTORCYCLE, ["Lince", "Barranco"]),
        ]
        couriers: list[Courier] = []
        for index, (first, last, vehicle, zones) in enumerate(fleet):
            courier, _ = Courier.objects.get_or_create(
                document_number=f"4{index:07d}",
                defaults={
                    "first_name": first,
                    "last_name": last,
                    "email": f"{first.lower()}.{last.lower()}@couriers.example.com",
                    "phone": f"98{index}444{index:03d}",
                    "document_type": DocumentType.DNI,
                    "birth_date": date(1990 + index, 1 + index, 10),
                    "vehicle_type": vehicle,
                    "vehicle_plate": f"A{index}B-{100 + index}",
                    "coverage_zones": zones,
                },
            )
            couriers.append(courier)
        self.stdout.write(self.style.SUCCESS("Creating couriers... Done!"))
        return couriers

    def _seed_orders(
        self,
        customers: list[Customer],
        products: list[Product],
        couriers: list[Courier],
        count: int,
    ) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        service = build_order_service()
        outcomes = ["pending", "confirmed", "delivered", "delivered", "cancelled"]

        for _ in range(count):
            customer = random.choice(customers)
            lines = random.sample(products, k=random.randint(1, 3))
            address = dict(
                customer.default_address
                or {"street": "Av. Larco", "number": "100", "district": "Miraflores"}
            )
            address.pop("id", None)
            order = service.create_order(
                CreateOrderDTO(
                    customer_id=customer.id,
                    items=[
                        {"product_id": p.id, "quantity": random.randint(1, 3)}
                        for p in lines
                    ],
                    delivery_address=address,
                    payment_method=random.choice(PaymentMethod.values),
                )
            )

            outcome = random.choice(outcomes)
            if outcome == "pending":
                continue
            if outcome == "cancelled":
                service.cancel_order(str(order.id), "Customer changed their mind")
                continue

            service.update_status(str(order.id), OrderStatus.CONFIRMED)
            if outcome == "delivered":
                courier = random.choice(couriers)
                service.assign_courier(str(order.id), str(courier.id))
                service.update_status(str(order.id), OrderStatus.DELIVERED)
                service.rate_order(str(order.id), random.randint(3, 5), "")

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
