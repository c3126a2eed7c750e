"""Integration tests for the orders API.

Covers:
- POST/GET/PUT/PATCH/DELETE on /api/v1/orders/.
- Filters, authentication, error format (``detail`` + ``code`` + context).
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.models import Order

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


@pytest.fixture()
def create_body(buyer, contact, sales_user, checker, dispatcher):
    return {
        "company": "SHHT",
        "client_id": str(buyer.id),
        "client_contact_person_id": str(contact.id),
        "order_no": "PO-API-1",
        "so_date": "2025-06-01",
        "order_date": "2025-05-30",
        "initiated_by": sales_user.pk,
        "checked_by": checker.pk,
        "dispatched_by": dispatcher.pk,
    }


class TestAuth:
    def test_requires_authentication(self, api_client):
        assert api_client.get(URL).status_code == 401


class TestCreate:
    def test_create_order(self, auth_client, create_body):
        response = auth_client.post(URL, create_body, format="json")

        assert response.status_code == 201
        data = response.json()
        assert data["so_no"].startswith("SHHT-0001-")
        assert data["status"] == "pending"
        assert data["allowed_next_statuses"] == ["dispatched"]
        assert data["client_name"] == "Apex Traders"
        assert len(data["status_history"]) == 1

    def test_invalid_payload(self, auth_client, create_body):
        create_body["company"] = "NOPE"
        del create_body["so_date"]

        response = auth_client.post(URL, create_body, format="json")

        assert response.status_code == 400
        fields = {err["loc"][0] for err in response.json()["errors"]}
        assert fields == {"company", "so_date"}

    def test_duplicate_order_no(self, auth_client, create_body):
        auth_client.post(URL, create_body, format="json")

        response = auth_client.post(URL, create_body, format="json")

        assert response.status_code == 409
        assert response.json()["code"] == "duplicate_order_number"
        assert response.json()["order_no"] == "PO-API-1"

    def test_unknown_client(self, auth_client, create_body):
        create_body["client_id"] = str(uuid4())
        response = auth_client.post(URL, create_body, format="json")
        assert response.status_code == 404
        assert response.json()["code"] == "client_not_found"

    def test_unknown_user(self, auth_client, create_body):
        create_body["checked_by"] = 999999
        response = auth_client.post(URL, create_body, format="json")
        assert response.status_code == 404
        assert response.json()["field"] == "checked_by"

    def test_inactive_client(self, auth_client, create_body, buyer):
        buyer.is_active = False
        buyer.save()
        response = auth_client.post(URL, create_body, format="json")
        assert response.status_code == 400


class TestReadUpdateDelete:
    def test_list_and_filter(self, auth_client, make_order):
        make_order(order_no="PO-A", company="SHHT")
        make_order(order_no="PO-B", company="SHAPL")

        all_orders = auth_client.get(URL).json()
        shapl = auth_client.get(URL, {"company": "SHAPL"}).json()

        assert all_orders["count"] == 2
        assert [o["order_no"] for o in shapl["results"]] == ["PO-B"]

    def test_filter_by_status(self, auth_client, make_order):
        make_order(order_no="PO-A")
        make_order(order_no="PO-B", status="completed")

        data = auth_client.get(URL, {"status": "completed"}).json()

        assert [o["order_no"] for o in data["results"]] == ["PO-B"]

    def test_retrieve(self, auth_client, make_order):
        order = make_order()
        response = auth_client.get(f"{URL}{order.id}/")
        assert response.status_code == 200
        assert response.json()["so_no"] == order.so_no

    @pytest.mark.parametrize("pk", ["not-a-uuid", str(uuid4())])
    def test_retrieve_missing(self, auth_client, pk):
        response = auth_client.get(f"{URL}{pk}/")
        assert response.status_code == 404
        assert response.json()["code"] == "order_not_found"

    def test_lookup_by_so_no(self, auth_client, make_order):
        order = make_order()
        assert "/" in order.so_no

        response = auth_client.get(f"{URL}by-so-no/{order.so_no}/")

        assert response.status_code == 200
        assert response.json()["id"] == str(order.id)
        assert response.json()["order_no"] == order.order_no

    def test_lookup_by_unknown_so_no(self, auth_client):
        response = auth_client.get(f"{URL}by-so-no/SHHT-9999-25/26/")
        assert response.status_code == 404
        assert response.json()["code"] == "order_not_found"
        assert response.json()["so_no"] == "SHHT-9999-25/26"

    def test_patch_ignores_status(self, auth_client, make_order):
        order = make_order()

        response = auth_client.patch(
            f"{URL}{order.id}/",
            {"drive_link": "https://drive.example.com/x", "status": "cancelled"},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["drive_link"] == "https://drive.example.com/x"
        assert response.json()["status"] == "pending"

    def test_put_order_no_clash(self, auth_client, make_order):
        make_order(order_no="PO-A")
        order = make_order(order_no="PO-B")

        response = auth_client.put(f"{URL}{order.id}/", {"order_no": "PO-A"}, format="json")

        assert response.status_code == 409

    def test_delete_returns_snapshot(self, auth_client, make_order):
        order = make_order()

        response = auth_client.delete(f"{URL}{order.id}/")

        assert response.status_code == 200
        assert response.json()["so_no"] == order.so_no
        assert not Order.objects.filter(id=order.id).exists()

    def test_delete_missing(self, auth_client):
        assert auth_client.delete(f"{URL}{uuid4()}/").status_code == 404
