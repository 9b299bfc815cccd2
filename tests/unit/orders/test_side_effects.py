"""Post-commit side effects of order transitions.

Events are published only after the transaction commits; handlers only
enqueue Celery tasks.
"""

from unittest import mock

import pytest

from modules.catalog.repositories.django_repository import FruitDjangoRepository
from modules.catalog.repositories.ledger import InventoryDjangoLedger
from modules.notifications.models import Notification, NotificationType
from modules.orders.constants import OrderStatus
from modules.orders.dispatcher import SideEffectDispatcher
from modules.orders.events import (
    OrderPaid,
    OrderStatusChanged,
    PaymentSlipUploaded,
)
from modules.orders.exceptions import InvalidOrderStatus
from modules.orders.factories import build_invoice_service
from modules.orders.handlers import (
    OrderPaidHandler,
    OrderStatusChangedHandler,
    PaymentSlipUploadedHandler,
)
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService

pytestmark = pytest.mark.unit


class TestDispatcher:
    def test_events_wait_for_commit(self, django_capture_on_commit_callbacks):
        bus = mock.Mock()
        dispatcher = SideEffectDispatcher(invoice_service=mock.Mock(), bus=bus)
        event = OrderPaid(aggregate_id=1)

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            dispatcher.publish_after_commit(event)

        assert len(callbacks) == 1
        bus.publish.assert_not_called()
        callbacks[0]()
        bus.publish.assert_called_once_with(event)

    def test_invoice_failure_is_swallowed_and_logged(self, make_order):
        invoices = mock.Mock()
        invoices.issue.side_effect = RuntimeError("boom")
        dispatcher = SideEffectDispatcher(invoice_service=invoices, bus=mock.Mock())

        assert dispatcher.issue_invoice(make_order()) is None

    def test_paid_transition_publishes_paid_event(
        self, make_order, django_capture_on_commit_callbacks
    ):
        bus = mock.Mock()
        service = OrderService(
            order_repository=OrderDjangoRepository(),
            fruit_repository=FruitDjangoRepository(),
            ledger=InventoryDjangoLedger(),
            dispatcher=SideEffectDispatcher(
                invoice_service=build_invoice_service(), bus=bus
            ),
        )
        order = make_order()

        with django_capture_on_commit_callbacks(execute=True):
            service.transition_status(order.id, OrderStatus.PAID)

        published = [call.args[0] for call in bus.publish.call_args_list]
        assert [type(e) for e in published] == [OrderStatusChanged, OrderPaid]
        assert all(e.aggregate_id == order.id for e in published)

    def test_rejected_transition_publishes_nothing(
        self, order_service, make_order, django_capture_on_commit_callbacks
    ):
        order = make_order()
        with django_capture_on_commit_callbacks() as callbacks:
            with pytest.raises(InvalidOrderStatus):
                order_service.transition_status(order.id, OrderStatus.RECEIVED)
        assert callbacks == []


class TestHandlers:
    @mock.patch("modules.orders.handlers.push_payment_confirmation")
    @mock.patch("modules.orders.handlers.notify_admins")
    def test_paid_handler_enqueues_tasks(self, notify_admins, push):
        OrderPaidHandler().handle(OrderPaid(aggregate_id=12))

        notify_admins.delay.assert_called_once_with(12, NotificationType.PAYMENT)
        push.delay.assert_called_once_with(12)

    @mock.patch("modules.orders.handlers.notify_admins")
    def test_slip_handler_notifies_admins(self, notify_admins):
        PaymentSlipUploadedHandler().handle(PaymentSlipUploaded(aggregate_id=5))
        notify_admins.delay.assert_called_once_with(5, NotificationType.PAYMENT_SLIP)

    @mock.patch("modules.orders.handlers.notify_customer")
    def test_status_change_notifies_customer(self, notify_customer):
        OrderStatusChangedHandler().handle(
            OrderStatusChanged(
                aggregate_id=9,
                old_status=OrderStatus.PAID,
                new_status=OrderStatus.SHIPPED,
            )
        )
        notify_customer.delay.assert_called_once_with(9, OrderStatus.SHIPPED)


class TestEndToEndFanOut:
    def test_slip_upload_notifies_every_admin(
        self,
        order_service,
        make_order,
        customer,
        staff_user,
        django_capture_on_commit_callbacks,
    ):
        order = make_order()
        with django_capture_on_commit_callbacks(execute=True):
            order_service.upload_payment_slip(order.id, customer.id, b"slip", None)

        admin_notes = Notification.objects.filter(user=staff_user)
        assert set(admin_notes.values_list("type", flat=True)) == {
            NotificationType.PAYMENT,
            NotificationType.PAYMENT_SLIP,
        }
        assert all(note.related_id == order.id for note in admin_notes)
        customer_note = Notification.objects.get(user=customer)
        assert customer_note.title == "Payment confirmed"
        assert customer_note.type == NotificationType.ORDER

    def test_cancellation_lands_in_customer_inbox(
        self, order_service, make_order, customer, django_capture_on_commit_callbacks
    ):
        order = make_order()
        with django_capture_on_commit_callbacks(execute=True):
            order_service.transition_status(order.id, OrderStatus.CANCELLED)

        note = Notification.objects.get(user=customer)
        assert note.title == "Order cancelled"
        assert note.related_id == order.id
        assert order.order_number in note.message
