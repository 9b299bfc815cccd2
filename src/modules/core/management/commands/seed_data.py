from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.accounts.models import Profile
from modules.catalog.models import Category, Fruit, UnitType
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, ShippingInfoDTO
from modules.orders.exceptions import InsufficientStock
from modules.orders.factories import build_order_service
from modules.orders.models import Order


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users = self._seed_users()
        fruits = self._seed_catalog()
        orders_created = self._seed_orders(users, fruits)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={len(users)}, "
                f"fruits={len(fruits)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> list:
        User = get_user_model()
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser(
                "admin", email="admin@example.com", password="admin123"
            )
        customers = []
        for username in ("somchai", "malee", "user"):
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(
                    username,
                    email=f"{username}@example.com",
                    password=f"{username}123",
                )
            Profile.objects.get_or_create(
                user=user, defaults={"address": "99 Sukhumvit Rd, Bangkok"}
            )
            customers.append(user)
        return customers

    def _seed_catalog(self) -> list[Fruit]:
        self.stdout.write("Creating fruits...")
        categories = {
            "Tropical": UnitType.KG,
            "Citrus": UnitType.KG,
            "Melons": UnitType.PIECE,
            "Gift baskets": UnitType.PIECE,
        }
        by_name = {}
        for name, unit in categories.items():
            by_name[name], _ = Category.objects.get_or_create(
                name=name, defaults={"unit": unit}
            )

        catalog = [
            ("Mango", "Tropical", Decimal("80.00"), Decimal("120.000")),
            ("Mangosteen", "Tropical", Decimal("120.00"), Decimal("60.500")),
            ("Durian", "Tropical", Decimal("250.00"), Decimal("35.000")),
            ("Rambutan", "Tropical", Decimal("60.00"), Decimal("80.250")),
            ("Pomelo", "Citrus", Decimal("45.00"), Decimal("50.000")),
            ("Tangerine", "Citrus", Decimal("55.00"), Decimal("70.000")),
            ("Watermelon", "Melons", Decimal("35.00"), Decimal("40")),
            ("Cantaloupe", "Melons", Decimal("90.00"), Decimal("25")),
            ("Festival basket", "Gift baskets", Decimal("990.00"), Decimal("10")),
        ]
        fruits: list[Fruit] = []
        for name, category, price, stock in catalog:
            fruit, _ = Fruit.objects.get_or_create(
                name=name,
                defaults={
                    "description": f"Fresh {name.lower()}",
                    "price": price,
                    "stock": stock,
                    "category": by_name[category],
                },
            )
            fruits.append(fruit)
        self.stdout.write(self.style.SUCCESS("Creating fruits... Done!"))
        return fruits

    def _seed_orders(self, users: list, fruits: list[Fruit]) -> int:
        """Create orders through the order service so stock stays reconciled."""
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        service = build_order_service()
        outcomes = [
            OrderStatus.PENDING,
            OrderStatus.PAID,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.CANCELLED,
        ]
        orders_created = 0
        for i in range(15):
            user = random.choice(users)
            items = []
            for fruit in random.sample(fruits, k=random.randint(1, 3)):
                if fruit.unit == UnitType.PIECE:
                    items.append(
                        CreateOrderItemDTO(
                            fruit_id=fruit.id, quantity=Decimal(random.randint(1, 3))
                        )
                    )
                else:
                    weight = Decimal(random.choice(["0.5", "1", "1.5", "2.25"]))
                    items.append(CreateOrderItemDTO(fruit_id=fruit.id, weight=weight))
            dto = CreateOrderDTO(
                user_id=user.id,
                items=items,
                shipping=ShippingInfoDTO(
                    shipping_address="99 Sukhumvit Rd",
                    shipping_city="Bangkok",
                    shipping_postal_code="10110",
                ),
                notes=f"Seed order {i + 1}",
            )
            try:
                order = service.create_order(dto)
                target = random.choice(outcomes)
                if target == OrderStatus.SHIPPED:
                    service.transition_status(order.id, OrderStatus.PAID)
                if target != OrderStatus.PENDING:
                    service.transition_status(order.id, target)
            except InsufficientStock as exc:
                self.stdout.write(self.style.WARNING(f"Skipped order: {exc}"))
                continue
            orders_created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
