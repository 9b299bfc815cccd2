from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.orders"
    label = "orders"

    def ready(self) -> None:
        from modules.orders.events import (
            OrderPaid,
            OrderStatusChanged,
            PaymentSlipUploaded,
        )
        from modules.orders.handlers import (
            order_paid_handler,
            order_status_changed_handler,
            payment_slip_uploaded_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(OrderPaid, order_paid_handler)
        event_bus.subscribe(PaymentSlipUploaded, payment_slip_uploaded_handler)
        event_bus.subscribe(OrderStatusChanged, order_status_changed_handler)
