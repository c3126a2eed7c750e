from __future__ import annotations

import random
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.clients.models import Client, ContactPerson
from modules.orders.constants import DISPATCH_GROUP, Company, OrderStatus
from modules.orders.dtos import CreateOrderDTO
from modules.orders.models import Order
from modules.orders.views import build_order_service


class Command(BaseCommand):
    help = "Seed database with development users, clients and sales orders."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=30)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users = self._seed_users()
        contacts = self._seed_clients()
        orders_created = self._seed_orders(users, contacts, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={len(users)}, "
                f"contacts={len(contacts)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> dict:
        User = get_user_model()
        dispatch_group, _ = Group.objects.get_or_create(name=DISPATCH_GROUP)

        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")

        users = {"admin": User.objects.get(username="admin")}
        for username, first, last in [
            ("sales", "Ravi", "Kumar"),
            ("checker", "Meena", "Iyer"),
            ("dispatch1", "Suresh", "Patel"),
            ("dispatch2", "Anita", "Desai"),
        ]:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"first_name": first, "last_name": last},
            )
            if created:
                user.set_password(f"{username}123")
                user.save()
            if username.startswith("dispatch"):
                user.groups.add(dispatch_group)
            users[username] = user
        return users

    def _seed_clients(self) -> list[ContactPerson]:
        self.stdout.write("Creating clients...")
        contacts: list[ContactPerson] = []
        seed_clients = [
            ("Apex Traders", "Mumbai", "Maharashtra", "400001", "Nikhil Shah"),
            ("Bharat Hydraulics", "Pune", "Maharashtra", "411001", "Kavita Joshi"),
            ("Coastal Pumps", "Chennai", "Tamil Nadu", "600001", "Arun Raj"),
            ("Deccan Fluid Power", "Hyderabad", "Telangana", "500001", "Farah Khan"),
            ("Eastern Engineering", "Kolkata", "West Bengal", "700001", "Sourav Das"),
        ]
        for name, city, state, pincode, contact_name in seed_clients:
            client, _ = Client.objects.get_or_create(
                name=name,
                defaults={"city": city, "state": state, "pincode": pincode},
            )
            contact, _ = ContactPerson.objects.get_or_create(
                client=client,
                name=contact_name,
                defaults={
                    "designation": "Purchase Manager",
                    "email": f"{contact_name.split()[0].lower()}@example.com",
                },
            )
            contacts.append(contact)
        self.stdout.write(self.style.SUCCESS("Creating clients... Done!"))
        return contacts

    def _seed_orders(self, users: dict, contacts: list[ContactPerson], count: int) -> int:
        self.stdout.write("Creating orders...")
        service = build_order_service()
        dispatchers = [users["dispatch1"], users["dispatch2"]]
        created = 0

        for i in range(count):
            order_no = f"PO-SEED-{i + 1:04d}"
            if Order.objects.filter(order_no=order_no).exists():
                continue

            contact = random.choice(contacts)
            so_date = timezone.localdate() - timedelta(days=random.randint(0, 30))
            order = service.create_order(
                CreateOrderDTO(
                    company=random.choice(Company.values),
                    client_id=contact.client_id,
                    client_contact_person_id=contact.id,
                    order_no=order_no,
                    so_date=so_date,
                    order_date=so_date,
                    initiated_by=users["sales"].pk,
                    checked_by=users["checker"].pk,
                    dispatched_by=random.choice(dispatchers).pk,
                ),
                actor=users["sales"],
            )
            created += 1

            # walk a share of the orders forward so every list has data
            if random.random() < 0.6:
                service.request_transition(
                    order.order_no,
                    OrderStatus.DISPATCHED,
                    actor=users["sales"],
                    extra={"dispatched_by": random.choice(dispatchers).pk},
                )
                if random.random() < 0.5:
                    service.request_transition(
                        order.order_no, OrderStatus.COMPLETED, actor=users["admin"]
                    )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created
