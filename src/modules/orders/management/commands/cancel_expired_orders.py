from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from modules.orders.factories import build_order_service


class Command(BaseCommand):
    help = "Cancel pending orders whose payment window has expired."

    def add_arguments(self, parser):
        parser.add_argument(
            "--minutes",
            type=int,
            default=None,
            help="Age threshold in minutes (default: ORDER_PAYMENT_TIMEOUT_MINUTES).",
        )

    def handle(self, *args, **options):
        minutes = options["minutes"]
        if minutes is None:
            minutes = settings.ORDER_PAYMENT_TIMEOUT_MINUTES
        try:
            cancelled = build_order_service().cancel_expired_orders(minutes)
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        for number in cancelled:
            self.stdout.write(f"Cancelled {number}")
        self.stdout.write(
            self.style.SUCCESS(f"Expired orders cancelled: {len(cancelled)}")
        )
