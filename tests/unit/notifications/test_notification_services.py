"""Unit tests for NotificationService and its Celery tasks."""

from decimal import Decimal
from unittest import mock

import pytest
from django.contrib.auth import get_user_model

from modules.accounts.models import Profile
from modules.notifications.exceptions import NotificationNotFound
from modules.notifications.models import Notification, NotificationType
from modules.notifications.repositories.django_repository import (
    NotificationDjangoRepository,
)
from modules.notifications.services import NotificationService
from modules.notifications.tasks import (
    notify_admins,
    notify_customer,
    push_payment_confirmation,
)
from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return NotificationService(NotificationDjangoRepository())


def _notify(user, **overrides):
    data = {"user": user, "title": "Hello", "message": "World"}
    data.update(overrides)
    return Notification.objects.create(**data)


class TestAdminFanOut:
    def test_one_row_per_active_admin(self, service, staff_user, customer):
        second_admin = get_user_model().objects.create_user(
            "manager", password="x", is_staff=True
        )
        get_user_model().objects.create_user(
            "retired", password="x", is_staff=True, is_active=False
        )

        created = service.notify_admins(
            NotificationType.PAYMENT, 7, "ORD-2026-1019-7", Decimal("60.00")
        )

        assert created == 2
        recipients = set(Notification.objects.values_list("user_id", flat=True))
        assert recipients == {staff_user.id, second_admin.id}
        note = Notification.objects.filter(user=staff_user).get()
        assert note.type == NotificationType.PAYMENT
        assert note.related_id == 7
        assert "ORD-2026-1019-7" in note.message

    def test_no_admins_no_rows(self, service, customer):
        assert service.notify_admins(NotificationType.PAYMENT, 1, "ORD", 1) == 0
        assert not Notification.objects.exists()



class TestCustomerNotice:
    def test_known_status_uses_its_message(self, service, customer):
        note = service.notify_customer(
            customer.id, 4, "ORD-2026-1019-4", OrderStatus.SHIPPED
        )

        assert note.user_id == customer.id
        assert note.title == "Order shipped"
        assert note.message == "Order ORD-2026-1019-4 is on its way."
        assert note.type == NotificationType.ORDER
        assert note.related_id == 4

    def test_other_status_uses_its_label(self, service, customer):
        note = service.notify_customer(
            customer.id, 4, "ORD-2026-1019-4", OrderStatus.PREPARING
        )

        assert note.title == "Order updated"
        assert note.message == "Order ORD-2026-1019-4 is now Preparing."

class TestInbox:
    def test_list_filters_and_counts_unread(self, service, customer):
        _notify(customer, is_read=True)
        unread = _notify(customer)

        result = service.list_for_user(customer.id, is_read=False)

        assert [n.id for n in result["notifications"]] == [unread.id]
        assert result["unread_count"] == 1

    def test_limit_and_offset(self, service, customer):
        for _ in range(3):
            _notify(customer)
        result = service.list_for_user(customer.id, limit=2, offset=1)
        assert len(result["notifications"]) == 2

    def test_mark_read_only_own(self, service, customer, other_customer):
        note = _notify(customer)
        with pytest.raises(NotificationNotFound):
            service.mark_read(note.id, other_customer.id)

        assert service.mark_read(note.id, customer.id).is_read is True

    def test_mark_all_read(self, service, customer, other_customer):
        _notify(customer)
        _notify(customer)
        theirs = _notify(other_customer)

        assert service.mark_all_read(customer.id) == 2
        theirs.refresh_from_db()
        assert theirs.is_read is False

    def test_delete(self, service, customer):
        note = _notify(customer)
        service.delete(note.id, customer.id)
        assert not Notification.objects.filter(id=note.id).exists()


class TestPushPaymentConfirmation:
    def test_skipped_without_notifier(self, service):
        assert service.push_payment_confirmation("U1", "ORD", Decimal("1"), 1) is False

    def test_sends_through_notifier(self, customer):
        notifier = mock.Mock()
        notifier.send.return_value = True
        service = NotificationService(NotificationDjangoRepository(), notifier=notifier)

        assert service.push_payment_confirmation("U1", "ORD-1", Decimal("5"), 3)
        line_user_id, messages = notifier.send.call_args.args
        assert line_user_id == "U1"
        assert messages[0]["type"] == "flex"


class TestTasks:
    def test_notify_admins_task(self, make_order, staff_user):
        order = make_order()
        count = notify_admins.delay(order.id, NotificationType.PAYMENT_SLIP).get()
        assert count == 1
        assert Notification.objects.get(user=staff_user).related_id == order.id

    def test_notify_admins_task_unknown_order(self, staff_user):
        assert notify_admins.delay(424242, NotificationType.PAYMENT).get() == 0

    def test_notify_customer_task(self, make_order, customer):
        order = make_order()

        note_id = notify_customer.delay(order.id, OrderStatus.CANCELLED).get()

        note = Notification.objects.get(id=note_id)
        assert note.user_id == customer.id
        assert note.title == "Order cancelled"

    def test_notify_customer_task_unknown_order(self, customer):
        assert notify_customer.delay(424242, OrderStatus.PAID).get() is None
        assert not Notification.objects.exists()

    def test_push_task_uses_profile_and_invoice(
        self, order_service, make_order, customer, settings
    ):
        settings.LINE_MESSAGING_CHANNEL_ACCESS_TOKEN = "token"
        Profile.objects.create(user=customer, line_user_id="U-somchai")
        order = make_order()
        order_service.transition_status(order.id, OrderStatus.PAID)

        with mock.patch(
            "modules.notifications.push.LinePushNotifier.send", return_value=True
        ) as send:
            assert push_payment_confirmation.delay(order.id).get() is True

        line_user_id, messages = send.call_args.args
        assert line_user_id == "U-somchai"
        assert f"invoiceId={order.invoice.id}" in str(messages)
