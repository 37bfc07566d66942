from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.core.exceptions import DomainError
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.payments.gateways import MockPaymentGateway
from modules.products.models import Product, ProductStatus
from modules.products.repositories.django_repository import ProductDjangoRepository

CATALOG = [
    ("Basmati Rice 5kg", "grocery", "bag", Decimal("950.00")),
    ("Red Lentils 1kg", "grocery", "packet", Decimal("180.00")),
    ("Mustard Oil 1L", "grocery", "bottle", Decimal("320.00")),
    ("Himalayan Tea 500g", "beverages", "packet", Decimal("450.00")),
    ("Instant Coffee 200g", "beverages", "jar", Decimal("780.00")),
    ("Fresh Milk 1L", "dairy", "pouch", Decimal("110.00")),
    ("Paneer 250g", "dairy", "pack", Decimal("260.00")),
    ("Yak Cheese 200g", "dairy", "pack", Decimal("640.00")),
    ("Dish Soap 500ml", "household", "bottle", Decimal("210.00")),
    ("Laundry Powder 1kg", "household", "packet", Decimal("290.00")),
    ("Notebook A5", "stationery", "piece", Decimal("85.00")),
    ("Ballpoint Pen Blue", "stationery", "piece", Decimal("20.00")),
]

CITIES = ["Kathmandu", "Lalitpur", "Bhaktapur", "Pokhara", "Biratnagar"]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=30)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        buyers = self._seed_users()
        products = self._seed_products()
        orders_created = self._seed_orders(buyers, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"buyers={len(buyers)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> list:
        User = get_user_model()
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
        buyers = []
        for name in ("sita", "ram", "gita"):
            user = User.objects.filter(username=name).first()
            if user is None:
                user = User.objects.create_user(
                    name, email=f"{name}@example.com", password=f"{name}123"
                )
            buyers.append(user)
        return buyers

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        for name, category, unit, price in CATALOG:
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={
                    "category": category,
                    "unit": unit,
                    "price": price,
                    "stock": random.randint(20, 200),
                    "status": ProductStatus.ACTIVE,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, buyers: list, products: list[Product], count: int) -> int:
        """Place orders through ``OrderService`` so stock stays consistent."""
        self.stdout.write("Creating orders...")
        product_repository = ProductDjangoRepository()
        service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=product_repository,
            payment_gateway=MockPaymentGateway(),
        )
        admin = get_user_model().objects.get(username="admin")

        created = 0
        for i in range(count):
            key = f"seed-order-{i + 1}"
            if Order.objects.filter(idempotency_key=key).exists():
                continue
            buyer = random.choice(buyers)
            picked = random.sample(products, k=random.randint(1, 4))
            dto = CreateOrderDTO(
                user_id=buyer.pk,
                items=[
                    CreateOrderItemDTO(product_id=p.id, quantity=random.randint(1, 3))
                    for p in picked
                ],
                shipping_address=f"Ward {random.randint(1, 32)}, Tole {i + 1}",
                phone=f"98{random.randint(10000000, 99999999)}",
                city=random.choice(CITIES),
                idempotency_key=key,
            )
            try:
                order = service.create_order(dto)
            except DomainError as exc:
                self.stdout.write(self.style.WARNING(f"Skipped order {i + 1}: {exc}"))
                continue
            created += 1
            if order.status != OrderStatus.PENDING:
                continue

            outcome = random.choices(
                ["pending", "processing", "delivered", "cancelled"],
                weights=[0.3, 0.25, 0.3, 0.15],
            )[0]
            if outcome == "cancelled":
                service.cancel_order(str(order.id), buyer.pk, "Changed my mind")
            elif outcome in ("processing", "delivered"):
                service.update_status(
                    str(order.id), OrderStatus.PROCESSING, actor_id=admin.pk
                )
                if outcome == "delivered":
                    service.update_status(
                        str(order.id), OrderStatus.DELIVERED, actor_id=admin.pk
                    )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created
