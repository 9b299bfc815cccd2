import re
from decimal import Decimal
from unittest import mock

import pytest
from django.db import IntegrityError, transaction

from modules.invoices.exceptions import InvoiceNotFound
from modules.invoices.models import Invoice
from modules.invoices.repositories.django_repository import InvoiceDjangoRepository
from modules.invoices.services import InvoiceService
from modules.orders.exceptions import OrderNotFound
from modules.orders.factories import build_invoice_service
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def invoice_service():
    return build_invoice_service()


class TestIssueForOrder:
    def test_issues_invoice_with_order_totals(self, invoice_service, make_order):
        order = make_order()

        invoice, created = invoice_service.issue_for_order(order.id)

        assert created
        assert re.fullmatch(r"INV-\d{4}-\d{4}-\d+", invoice.invoice_number)
        assert invoice.subtotal == Decimal("60.00")
        assert invoice.total_amount == order.total_amount
        assert invoice.user_id == order.user_id

    def test_second_call_returns_existing(self, invoice_service, make_order):
        order = make_order()
        first, _ = invoice_service.issue_for_order(order.id)

        second, created = invoice_service.issue_for_order(order.id)

        assert not created
        assert second.id == first.id
        assert Invoice.objects.filter(order=order).count() == 1

    def test_concurrent_insert_returns_winner(self, invoice_service, make_order):
        order = make_order()
        winner, _ = invoice_service.issue_for_order(order.id)
        repo = InvoiceDjangoRepository()
        service = InvoiceService(repo, OrderDjangoRepository())

        # The losing request saw no invoice, then hit the unique constraint.
        with mock.patch.object(
            repo, "get_by_order", side_effect=[None, winner]
        ), mock.patch.object(repo, "create", side_effect=IntegrityError("dup")):
            invoice, created = service.issue_for_order(order.id)

        assert not created
        assert invoice.id == winner.id

    def test_unknown_order(self, invoice_service):
        with pytest.raises(OrderNotFound):
            invoice_service.issue_for_order(424242)

    def test_transactions_run_on_the_configured_connection(self, make_order):
        order = make_order()
        service = build_invoice_service(using="default")

        with mock.patch(
            "modules.invoices.services.transaction.atomic", wraps=transaction.atomic
        ) as atomic:
            service.issue_for_order(order.id)

        assert atomic.call_count >= 2
        assert all(
            call.kwargs.get("using") == "default" for call in atomic.call_args_list
        )


class TestInvoiceVisibility:
    def test_owner_and_admin_see_invoice(
        self, invoice_service, make_order, customer, staff_user
    ):
        invoice, _ = invoice_service.issue_for_order(make_order().id)

        assert invoice_service.get_invoice(invoice.id, customer).id == invoice.id
        assert invoice_service.get_invoice(invoice.id, staff_user).id == invoice.id

    def test_other_customer_gets_not_found(
        self, invoice_service, make_order, other_customer
    ):
        invoice, _ = invoice_service.issue_for_order(make_order().id)

        with pytest.raises(InvoiceNotFound):
            invoice_service.get_invoice(invoice.id, other_customer)
