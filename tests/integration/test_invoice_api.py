import pytest

from modules.invoices.models import Invoice

pytestmark = pytest.mark.integration

URL = "/api/v1/invoices/"


class TestInvoiceApi:
    def test_direct_issue_leaves_order_status(self, auth_client, make_order, sales_user):
        order = make_order()

        response = auth_client.post(
            URL,
            {"order": str(order.id), "invoice_number": "INV-D1", "invoice_date": "2025-02-01"},
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["so_no"] == order.so_no
        assert body["billed_by"] == sales_user.pk
        order.refresh_from_db()
        assert order.status == "pending"
        assert order.invoice_id is None

    def test_duplicate_number(self, auth_client, make_order):
        first = make_order(order_no="PO-1")
        second = make_order(order_no="PO-2")
        body = {"order": str(first.id), "invoice_number": "INV-D1", "invoice_date": "2025-02-01"}
        auth_client.post(URL, body, format="json")

        response = auth_client.post(URL, {**body, "order": str(second.id)}, format="json")

        assert response.status_code == 409
        assert Invoice.objects.count() == 1

    def test_blank_number_rejected(self, auth_client, make_order):
        order = make_order()
        response = auth_client.post(
            URL,
            {"order": str(order.id), "invoice_number": "  ", "invoice_date": "2025-02-01"},
            format="json",
        )
        assert response.status_code == 400

    def test_unknown_biller(self, auth_client, make_order):
        order = make_order()
        response = auth_client.post(
            URL,
            {
                "order": str(order.id),
                "invoice_number": "INV-D2",
                "invoice_date": "2025-02-01",
                "billed_by": 999999,
            },
            format="json",
        )
        assert response.status_code == 404

    def test_list_filter_and_retrieve(self, auth_client, make_order):
        order = make_order()
        created = auth_client.post(
            URL,
            {"order": str(order.id), "invoice_number": "INV-D3", "invoice_date": "2025-02-01"},
            format="json",
        ).json()

        listed = auth_client.get(URL, {"invoice_number": "inv-d3"}).json()
        detail = auth_client.get(f"{URL}{created['id']}/")

        assert listed["count"] == 1
        assert detail.status_code == 200
        assert detail.json()["order_no"] == order.order_no
