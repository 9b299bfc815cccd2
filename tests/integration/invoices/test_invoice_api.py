from decimal import Decimal

import pytest

from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.integration

INVOICES_URL = "/api/v1/invoices/"


@pytest.fixture()
def paid_order(order_service, make_order):
    order = make_order()
    return order_service.transition_status(order.id, OrderStatus.PAID)


@pytest.fixture()
def invoice(paid_order):
    return paid_order.invoice


class TestInvoiceApi:
    def test_requires_authentication(self, api_client):
        assert api_client.get(INVOICES_URL).status_code == 401

    def test_owner_lists_own_invoices(self, customer_client, other_client, invoice):
        response = customer_client.get(INVOICES_URL)

        assert response.status_code == 200
        assert [i["invoice_number"] for i in response.data["results"]] == [
            invoice.invoice_number
        ]
        assert other_client.get(INVOICES_URL).data["count"] == 0

    def test_all_invoices_is_admin_only(self, customer_client, staff_client, invoice):
        assert customer_client.get(f"{INVOICES_URL}all/").status_code == 403

        response = staff_client.get(f"{INVOICES_URL}all/")
        assert response.status_code == 200
        assert response.data["count"] == 1

    def test_retrieve_includes_order_lines(self, customer_client, invoice, paid_order):
        response = customer_client.get(f"{INVOICES_URL}{invoice.id}/")

        assert response.status_code == 200
        assert response.data["order_number"] == paid_order.order_number
        assert Decimal(response.data["total_amount"]) == Decimal("60.00")
        assert len(response.data["items"]) == 2

    def test_other_customer_gets_404(self, other_client, invoice):
        assert other_client.get(f"{INVOICES_URL}{invoice.id}/").status_code == 404

    def test_by_order(self, customer_client, staff_client, invoice, paid_order):
        url = f"{INVOICES_URL}order/{paid_order.id}/"

        assert customer_client.get(url).data["id"] == invoice.id
        assert staff_client.get(url).status_code == 200

    def test_by_order_without_invoice_is_404(self, customer_client, make_order):
        order = make_order()
        response = customer_client.get(f"{INVOICES_URL}order/{order.id}/")
        assert response.status_code == 404

    def test_download_without_renderer_is_501(self, customer_client, invoice):
        response = customer_client.get(f"{INVOICES_URL}{invoice.id}/download/")
        assert response.status_code == 501

    def test_download_hidden_invoice_is_404(self, other_client, invoice):
        response = other_client.get(f"{INVOICES_URL}{invoice.id}/download/")
        assert response.status_code == 404
