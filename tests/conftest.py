from datetime import date

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from modules.clients.models import Client, ContactPerson
from modules.orders.constants import DISPATCH_GROUP
from modules.orders.dtos import CreateOrderDTO
from modules.orders.views import build_order_service


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
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


@pytest.fixture()
def sales_user():
    return get_user_model().objects.create_user(
        "sales", password="sales-pass", first_name="Ravi", last_name="Kumar"
    )


@pytest.fixture()
def checker():
    return get_user_model().objects.create_user("checker", password="checker-pass")


@pytest.fixture()
def dispatcher():
    user = get_user_model().objects.create_user(
        "dispatcher", password="dispatch-pass", first_name="Suresh", last_name="Patel"
    )
    group, _ = Group.objects.get_or_create(name=DISPATCH_GROUP)
    user.groups.add(group)
    return user


@pytest.fixture()
def admin_user_obj():
    return get_user_model().objects.create_superuser("root", password="root-pass")


@pytest.fixture()
def auth_client(api_client, sales_user):
    api_client.force_authenticate(user=sales_user)
    return api_client


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


@pytest.fixture()
def buyer():
    return Client.objects.create(
        name="Apex Traders", city="Mumbai", state="Maharashtra", pincode="400001"
    )


@pytest.fixture()
def contact(buyer):
    return ContactPerson.objects.create(
        client=buyer,
        name="Nikhil Shah",
        designation="Purchase Manager",
        email="nikhil@example.com",
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    return build_order_service()


@pytest.fixture()
def order_payload(buyer, contact, sales_user, checker, dispatcher):
    """Valid ``CreateOrderDTO`` fields; override per test."""

    def _payload(**overrides):
        data = {
            "company": "SHHT",
            "client_id": buyer.id,
            "client_contact_person_id": contact.id,
            "order_no": "PO-1001",
            "so_date": date(2025, 6, 1),
            "order_date": date(2025, 5, 30),
            "initiated_by": sales_user.pk,
            "checked_by": checker.pk,
            "dispatched_by": dispatcher.pk,
        }
        data.update(overrides)
        return data

    return _payload


@pytest.fixture()
def make_order(order_service, order_payload, sales_user):
    """Create an order through the service."""

    def _make(**overrides):
        return order_service.create_order(
            CreateOrderDTO(**order_payload(**overrides)), actor=sales_user
        )

    return _make
